"""Race conditions text, claiming price range and the one-line race summary."""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from racechart.distance import DIST_SURF_RECORD_PATTERN, is_valid_distance_text
from racechart.exceptions import ClaimingPriceParseError
from racechart.purse import Purse, parse_amount
from racechart.race_type import RaceTypeNameBlackTypeBreed, parse_race_type_line
from racechart.restrictions import ALL_SEXES, RaceRestrictions, parse_restrictions

logger = logging.getLogger(__name__)

_CLAIMING_PRICE = re.compile(
    r"Claiming Price: \$([0-9]{1,3}(,[0-9]{3})*)( - \$([0-9]{1,3}(,[0-9]{3})*))?$"
)


@dataclass(frozen=True)
class ClaimingPriceRange:
    min: int
    max: int


@dataclass
class RaceConditions:
    text: str
    claiming_price_range: Optional[ClaimingPriceRange]
    restrictions: Optional[RaceRestrictions]
    race_type: Optional[RaceTypeNameBlackTypeBreed] = None
    purse: Optional[Purse] = None

    @property
    def summary(self) -> Optional[str]:
        return build_summary(self.restrictions, self.race_type, self.claiming_price_range, self.purse)


def conditions_text(texts: Sequence[str]) -> str:
    """Join the lines between the race-type line and the distance line."""
    parts: list[str] = []
    found = False
    for text in texts:
        if found:
            if DIST_SURF_RECORD_PATTERN.search(text) and is_valid_distance_text(text):
                break
            parts.append(text)
        elif parse_race_type_line(text) is not None:
            found = True
    return " ".join(parts)


def parse_conditions(texts: Sequence[str]) -> RaceConditions:
    text = conditions_text(texts)
    return RaceConditions(
        text=text,
        claiming_price_range=parse_claiming_price_range(text),
        restrictions=parse_restrictions(text) if text else None,
    )


def parse_claiming_price_range(text: str) -> Optional[ClaimingPriceRange]:
    """"Claiming Price: $25,000 - $20,000" -> min 20000, max 25000."""
    m = _CLAIMING_PRICE.search(text)
    if not m:
        return None

    try:
        max_claim = parse_amount(m.group(1))
    except ValueError as e:
        raise ClaimingPriceParseError(
            f"Unable to parse a max claim price value from text: {m.group(1)}"
        ) from e

    min_claim = max_claim
    if m.group(4) is not None:
        try:
            min_claim = parse_amount(m.group(4))
        except ValueError as e:
            raise ClaimingPriceParseError(
                f"Unable to parse a min claim price value from text: {m.group(4)}"
            ) from e

    if min_claim > max_claim:
        min_claim, max_claim = max_claim, min_claim

    return ClaimingPriceRange(min=min_claim, max=max_claim)


# ── Summary ─────────────────────────────────────────────────────────────────


def _thousands(amount: int) -> str:
    # below 10,000 keep one decimal, e.g. 5.5K
    if amount >= 10000:
        return str(amount // 1000)
    return f"{amount / 1000:.1f}"


def _append(code: str, part: str) -> str:
    return f"{code} {part}" if code else part


def build_summary(
    restrictions: Optional[RaceRestrictions],
    race_type: Optional[RaceTypeNameBlackTypeBreed],
    claiming_price_range: Optional[ClaimingPriceRange],
    purse: Optional[Purse],
) -> Optional[str]:
    """Compact race description, e.g. "3+ (F&M) [S] CLM 25-20K (NW2 L)"."""
    code = ""
    if restrictions is not None:
        if restrictions.age_code is not None:
            code = restrictions.age_code
        if restrictions.sexes_code is not None and restrictions.sexes != ALL_SEXES:
            code = _append(code, f"({restrictions.sexes_code})")
        if restrictions.state_bred:
            code = _append(code, "[S]")

    claiming = False
    if race_type is not None:
        claiming = race_type.is_claiming
        if race_type.grade is not None:
            code = _append(code, f"G{race_type.grade}")
        elif race_type.code is not None:
            code = _append(code, race_type.code)

    if claiming:
        if claiming_price_range is not None and claiming_price_range.max > 0:
            short = _thousands(claiming_price_range.max)
            low = claiming_price_range.min
            if low != claiming_price_range.max and low > 0:
                short = f"{short}-{_thousands(low)}"
            code = _append(code, f"{short}K")
    elif purse is not None and purse.value is not None:
        code = _append(code, f"{_thousands(purse.value)}K")

    if restrictions is not None and restrictions.code is not None:
        code = _append(code, f"({restrictions.code})")

    return code or None
