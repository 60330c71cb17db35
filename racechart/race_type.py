"""Race type, name, black type and breed from the chart's race-type line."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from racechart.exceptions import RaceTypeNotIdentifiable
from racechart.models import Breed

logger = logging.getLogger(__name__)

# Longer phrases first so e.g. "MAIDEN CLAIMING" wins over "MAIDEN"
RACE_TYPE_CODES: dict[str, str] = {
    "SPEED INDEX OPTIONAL CLAIMING": "SPO",
    "INVITATIONAL HANDICAP STAKES": "IHS",
    "ALLOWANCE OPTIONAL CLAIMING": "AOC",
    "OPTIONAL CLAIMING HANDICAP": "OCH",
    "STARTER OPTIONAL CLAIMING": "SOC",
    "MAIDEN OPTIONAL CLAIMING": "MOC",
    "MAIDEN STARTER ALLOWANCE": "MSA",
    "OPTIONAL CLAIMING STAKES": "OCS",
    "SPEED INDEX CONSOLATION": "SPC",
    "WAIVER MAIDEN CLAIMING": "WMC",
    "INVITATIONAL HANDICAP": "INH",
    "MAIDEN SPECIAL WEIGHT": "MSW",
    "FUTURITY CONSOLATION": "FCN",
    "INVITATIONAL STAKES": "INS",
    "CLAIMING HANDICAP": "CLH",
    "OPTIONAL CLAIMING": "OCL",
    "SPEED INDEX FINAL": "SPF",
    "SPEED INDEX TRIAL": "SPT",
    "STARTER ALLOWANCE": "STA",
    "UNKNOWN RACE TYPE": "UNK",
    "SPEED INDEX RACE": "SPR",
    "STARTER HANDICAP": "STH",
    "ALLOWANCE TRIAL": "ATR",
    "CLAIMING STAKES": "CST",
    "HANDICAP STAKES": "HCS",
    "MAIDEN CLAIMING": "MCL",
    "WAIVER CLAIMING": "WCL",
    "FUTURITY TRIAL": "FTR",
    "MATURITY TRIAL": "MTR",
    "STARTER STAKES": "STS",
    "MAIDEN STAKES": "MST",
    "CHAMPIONSHIP": "CHP",
    "INVITATIONAL": "INV",
    "MAIDEN TRIAL": "MDT",
    "CONSOLATION": "CON",
    "DERBY TRIAL": "DTR",
    "MATCH RACE": "MCH",
    "ALLOWANCE": "ALW",
    "CLAIMING": "CLM",
    "FUTURITY": "FUT",
    "HANDICAP": "HCP",
    "MATURITY": "MAT",
    "MAIDEN": "MDN",
    "STAKES": "STK",
    "TRIALS": "TRL",
    "DERBY": "DBY",
    "FINAL": "FNL",
    "MATCH": "MCH",
    "STAKE": "STK",
    "TRIAL": "TRL",
}

_RACE_TYPE_NAME_GRADE_BREED = re.compile(
    r"^(" + "|".join(RACE_TYPE_CODES) + r")\s+(.+?)?\s?"
    r"(Grade ([123])|Listed|Black Type)?\s*-\s*(Thoroughbred|Quarter Horse|Arabian|Mixed)$"
)

# Grand Prairie prints its claiming stakes in mixed case
_CLAIMING_STAKE_TYPO = "Claiming stake "


@dataclass(frozen=True)
class RaceTypeNameBlackTypeBreed:
    type: str
    breed: Breed
    name: Optional[str] = None
    grade: Optional[int] = None
    black_type: Optional[str] = None

    @property
    def code(self) -> Optional[str]:
        return RACE_TYPE_CODES.get(self.type)

    @property
    def is_claiming(self) -> bool:
        return "CLAIM" in self.type


def parse_race_type_line(text: str) -> Optional[RaceTypeNameBlackTypeBreed]:
    """Parse one line of text; None when it is not a race-type line.

    Raises NoMatchingBreed if the breed token is not a known breed.
    """
    if text.startswith(_CLAIMING_STAKE_TYPO):
        text = text.replace(_CLAIMING_STAKE_TYPO, "CLAIMING STAKES ", 1)

    m = _RACE_TYPE_NAME_GRADE_BREED.search(text)
    if not m:
        return None

    breed = Breed.for_chart_value(m.group(5))
    grade = None
    black_type = m.group(3)
    if black_type is not None and m.group(4) is not None:
        grade = int(m.group(4))
    name = m.group(2).strip() if m.group(2) is not None else None

    return RaceTypeNameBlackTypeBreed(
        type=m.group(1).strip(),
        breed=breed,
        name=name or None,
        grade=grade,
        black_type=black_type,
    )


def find_race_type(texts: Iterable[str]) -> tuple[int, RaceTypeNameBlackTypeBreed]:
    """Return the index and parsed value of the first race-type line.

    Raises RaceTypeNotIdentifiable when no line matches.
    """
    for index, text in enumerate(texts):
        parsed = parse_race_type_line(text)
        if parsed is not None:
            return index, parsed
    raise RaceTypeNotIdentifiable()
