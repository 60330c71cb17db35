"""Purse value, available money, enhancements and value of race."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from racechart.exceptions import PurseParseError

logger = logging.getLogger(__name__)

PURSE_PATTERN = re.compile(r"Purse: (\$([0-9]{1,3}(,[0-9]{3})*)( .+)?)")
FOREIGN_CURRENCY_DISCLAIMER = re.compile(
    r"^All money values represented in [a-zA-Z0-9_ ]* currency unless noted otherwise$"
)
_AVAILABLE_MONEY = re.compile(r"Available Money: (\$.+)")
_INCLUDES = re.compile(r"Includes: (\$.+)")
_PLUS = re.compile(r"Plus: (\$.+)")
_VALUE_OF_RACE = re.compile(r"Value of Race: (\$[\s\S]+)")


def parse_amount(text: str) -> int:
    """"25,000" or "$25,000" -> 25000; raises ValueError."""
    return int(text.replace("$", "").replace(",", "").strip())


class EnhancementType(str, Enum):
    INCLUDES = "Includes"
    PLUS = "Plus"


@dataclass(frozen=True)
class PurseEnhancement:
    type: EnhancementType
    text: str


@dataclass
class Purse:
    value: Optional[int] = None
    text: Optional[str] = None
    available_money: Optional[str] = None
    value_of_race: Optional[str] = None
    foreign_currency: bool = False
    enhancement_list: list[PurseEnhancement] = field(default_factory=list)

    @property
    def enhancements(self) -> Optional[str]:
        """E.g. "Includes: $10,000 KTDF, Plus: $5,000 Breeders' Cup"."""
        if not self.enhancement_list:
            return None
        return ", ".join(f"{e.type.value}: {e.text}" for e in self.enhancement_list)


def parse_purse(texts: Iterable[str]) -> Purse:
    purse = Purse()
    for text in texts:
        parse_purse_text(text, purse)
    return purse


def parse_purse_text(text: str, purse: Purse) -> Purse:
    m = PURSE_PATTERN.search(text)
    if m:
        try:
            purse.value = parse_amount(m.group(2))
        except ValueError as e:
            raise PurseParseError(f"Failed to parse purse value text: {text}") from e
        purse.text = m.group(1)

    m = _AVAILABLE_MONEY.search(text)
    if m:
        purse.available_money = m.group(1)

    m = _INCLUDES.search(text)
    if m:
        purse.enhancement_list.append(PurseEnhancement(EnhancementType.INCLUDES, m.group(1)))

    m = _PLUS.search(text)
    if m:
        purse.enhancement_list.append(PurseEnhancement(EnhancementType.PLUS, m.group(1)))

    m = _VALUE_OF_RACE.search(text)
    if m:
        purse.value_of_race = m.group(1).replace("\n", " ")

    if FOREIGN_CURRENCY_DISCLAIMER.search(text):
        purse.foreign_currency = True

    return purse
