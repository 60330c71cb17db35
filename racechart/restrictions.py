"""Age, sex and state-bred restrictions from free-text race conditions.

Conditions text is noisy ("FOR FILLIES AND MARES THREE YEARS OLD AND
UPWARD", "For 3yos (SNW1 Y)"), so it is normalised first, parenthesised
codes are lifted out, and each "or"-separated condition is matched against
one of two mirrored grammars depending on whether the age or the sex clause
comes first.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ALL_SEXES = 31
AND_UP = -1

# 1 colts, 2 geldings, 4 horses, 8 fillies, 16 mares
SEXES_CODES: dict[int, Optional[str]] = {
    0: None,
    1: "C",
    2: "G",
    3: "C&G",
    4: "H",
    5: "C&H",
    6: "G&H",
    7: "C&G&H",
    8: "F",
    9: "C&F",
    10: "G&F",
    11: "C&G&F",
    12: "F&H",
    13: "C&H&F",
    14: "G&H&F",
    15: "C&G&H&F",
    16: "M",
    17: "C&M",
    18: "G&M",
    19: "C&G&M",
    20: "H&M",
    21: "C&H&M",
    22: "G&H&M",
    23: "C&G&H&M",
    24: "F&M",
    25: "C&F&M",
    26: "G&F&M",
    27: "C&G&F&M",
    28: "H&F&M",
    29: "C&H&F&M",
    30: "G&H&F&M",
    ALL_SEXES: "A",
}

_FIRST_SEX_BITS = {"colts": 1, "fillies": 8, "mares": 16}
_OTHER_SEX_BITS = {"geldings": 2, "horses": 4, "fillies": 8, "mares": 16}

# ── Text clean-up ───────────────────────────────────────────────────────────

_TYPOS = [
    (re.compile(r"\by-year-olds\b"), "year olds"),
    (re.compile(r"\bfillies/mares\b"), "fillies and mares"),
    (re.compile(r"\b(thre|theee)\b"), "three"),
    (re.compile(r"\bthreeyear\b"), "three year"),
    (re.compile(r"\bttwo\b"), "two"),
    (re.compile(r"\bmaresthree\b"), "mares three"),
    (re.compile(r"\btears? olds?\b"), "year olds"),
]

_SPACING = [
    (re.compile(r"[.,:;\[\]\-\"'%+\\/*!]"), " "),
    (re.compile(r"&"), " & "),
    (re.compile(r"# "), "#"),
    (re.compile(r"\(\s*"), " ("),
    (re.compile(r"\s*\)"), ") "),
    (re.compile(r"<.+>\s?"), ""),
]

_SPELLINGS = [
    (re.compile(r"\b(fof|f0r|fo|foe|fofor|foor|ffor)\b"), "for"),
    (re.compile(r"\b(colt)\b"), "colts"),
    (re.compile(r"\b(gelding)\b"), "geldings"),
    (
        re.compile(
            r"\b(filly|filiies|filles|filllies|filies|fillie|fililies|filliies"
            r"|fllies|filli\ses|fillie\ss)\b"
        ),
        "fillies",
    ),
    (re.compile(r"\b(mare|maress|mareds|marees|amres)\b"), "mares"),
    (re.compile(r"\b(yaer|yera|yr|yar|yer|yers)\b"), "years"),
    (re.compile(r"\b(and|adn|ands|und|amd|ans|a\snd|an\sd)\b"), "&"),
    (re.compile(r"\b(oldsa|olda|ols|0lds|onld)\b"), "olds"),
    (re.compile(r"\b(up|upaward|uwpard|uward|upwrd|upqward|upwa|upwar)\b"), "upwards"),
]

_NUMBER_WORDS = [
    "one", "two", "three", "four", "five", "six",
    "seven", "eight", "nine", "ten", "eleven", "twelve",
]
_NUMERALS = [
    (re.compile(rf"\b({word})\b"), str(number))
    for number, word in enumerate(_NUMBER_WORDS, start=1)
]

_WHITESPACE = re.compile(r"\s{2,}|\t{1,}")


def clean_up_text(text: str) -> str:
    """Normalise conditions text: lower case, typos fixed, numerals as digits."""
    text = text.lower()
    for pattern, replacement in _TYPOS + _SPACING + _SPELLINGS + _NUMERALS:
        text = pattern.sub(replacement, text)
    return _WHITESPACE.sub(" ", text)


# ── Grammars ────────────────────────────────────────────────────────────────

# e.g. "(s)", "(c)", "(snw1 y)", "( nw2 l)"
_PARENTHESES_TEXT = re.compile(r"(\s*\([^)]+\)\s*)")
_RESTRICTIONS_CODE = re.compile(r"\(\s*([c])\s*\)|\(\s*([s])\s*\)|\((s?nw[^)]+)\)")
_WEIGHT_DETECTION = re.compile(r".*\bweight \d{3}\s?lbs\b.*")

# weight allowance text following an age or sex clause, e.g. " allowed 3 lbs", " 119 lbs"
_FALSE_POSITIVE = r"((\s?allowed)?(\s?\d?\d?\d\s?lbs)?)?"

# "2 year olds", "3 & up", "4yo", "3 4 & 5 year olds", "4yrs & older"
_AGES = (
    r"((((?<!#)\b\d)(\s&?\s?(\d?\d))?(\s&?\s?(\d?\d))?"
    r"(\s&?\s?(\d?\d))?(\s&?\s?(\d?\d))?(\s?yrs? olds?|yrs?|yos?|\s?years? "
    r"olds?))( & (upwards?|up\b|olders?))?|(\b\d\b)( & (upwards?|up\b)))" + _FALSE_POSITIVE
)

# "colts & geldings", "fillies & mares", "colts geldings & horses"
_SEXES = r"(colts|fillies|mares)( (geldings))?( & (geldings|mares|horses|fillies))?" + _FALSE_POSITIVE

_AGES_PATTERN = re.compile(_AGES)
_SEXES_PATTERN = re.compile(_SEXES)

_SEXES_THEN_AGES = re.compile(r"^(for.+?|.+?for.+?|.*?)?" + _SEXES + r"[^\d]*(" + _AGES + r")?.*")
_AGES_THEN_SEXES = re.compile(r"^(for.+?|.*?)?" + _AGES + r".*?(?=" + _SEXES + r"|$).*")


@dataclass(frozen=True)
class _Grammar:
    """A condition grammar and where its sex and age groups start."""

    pattern: re.Pattern
    sex_offset: int
    age_offset: int


_SEXES_FIRST = _Grammar(_SEXES_THEN_AGES, sex_offset=0, age_offset=13)
_AGES_FIRST = _Grammar(_AGES_THEN_SEXES, sex_offset=20, age_offset=4)


# ── Restrictions ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RestrictionCode:
    code: Optional[str]
    state_bred: bool


@dataclass(frozen=True)
class RaceRestrictions:
    code: Optional[str]
    min_age: Optional[int]
    max_age: Optional[int]
    age_code: Optional[str]
    sexes: int
    sexes_code: Optional[str]
    female_only: bool
    state_bred: bool

    @classmethod
    def create(
        cls,
        code: Optional[str],
        min_age: Optional[int],
        max_age: Optional[int],
        sexes: int,
        state_bred: bool,
    ) -> "RaceRestrictions":
        if max_age is None:
            max_age = min_age
        return cls(
            code=code,
            min_age=min_age,
            max_age=max_age,
            age_code=age_code(min_age, max_age),
            sexes=sexes,
            sexes_code=SEXES_CODES.get(sexes),
            female_only=sexes % 8 == 0,
            state_bred=state_bred,
        )

    @classmethod
    def from_code(
        cls,
        restriction_code: Optional[RestrictionCode],
        min_age: Optional[int],
        max_age: Optional[int],
        sexes: int,
    ) -> "RaceRestrictions":
        return cls.create(
            restriction_code.code if restriction_code else None,
            min_age,
            max_age,
            sexes,
            restriction_code.state_bred if restriction_code else False,
        )


def age_code(min_age: Optional[int], max_age: Optional[int]) -> Optional[str]:
    """"3", "3+" (and up) or "3-4"."""
    if min_age is None:
        return None
    if min_age == max_age:
        return str(min_age)
    if max_age == AND_UP:
        return f"{min_age}+"
    return f"{min_age}-{max_age}"


def parse_restrictions(conditions_text: str) -> RaceRestrictions:
    """Parse the restrictions out of a race's conditions text.

    Never fails: text with no recognisable age or sex clause gives no ages
    and all sexes.
    """
    text = clean_up_text(conditions_text)

    in_parentheses = [m.group() for m in _PARENTHESES_TEXT.finditer(text)]
    restriction_code = _parse_restriction_code(in_parentheses)
    for fragment in in_parentheses:
        text = text.replace(fragment, " ").strip()

    restrictions = _build_restrictions(text, restriction_code)
    if restrictions is not None:
        return restrictions

    return RaceRestrictions.from_code(restriction_code, None, None, ALL_SEXES)


def _parse_restriction_code(fragments: list[str]) -> Optional[RestrictionCode]:
    for fragment in fragments:
        m = _RESTRICTIONS_CODE.search(fragment)
        if not m:
            continue
        if m.group(1) is not None:
            return RestrictionCode("C", False)
        if m.group(2) is not None:
            return RestrictionCode(None, True)
        group = m.group(3)
        state_bred = "s" in group
        if state_bred:
            group = group.replace("s", "")
        return RestrictionCode(group.upper(), state_bred)
    return None


def _build_restrictions(
    text: str, restriction_code: Optional[RestrictionCode]
) -> Optional[RaceRestrictions]:
    restrictions: Optional[RaceRestrictions] = None

    for condition in re.split(r"\bor\b", text):
        if not condition:
            continue

        # nothing after a fixed-weight clause describes who may enter
        weight_detected = _WEIGHT_DETECTION.search(condition) is not None

        condition = condition.strip()
        grammar = _choose_grammar(condition)
        if grammar is not None:
            parsed = _parse_condition(condition, grammar, restriction_code, restrictions)
            if parsed is not None:
                if restrictions is not None:
                    parsed = merge_restrictions(restriction_code, parsed, restrictions)
                restrictions = parsed

        if weight_detected:
            break

    return restrictions


def _choose_grammar(condition: str) -> Optional[_Grammar]:
    age = _AGES_PATTERN.search(condition)
    sex = _SEXES_PATTERN.search(condition)
    age_position = age.start() if age else None
    sex_position = sex.start() if sex else None

    if age_position == sex_position:
        return None
    if sex_position is None or (age_position is not None and age_position < sex_position):
        return _AGES_FIRST
    return _SEXES_FIRST


def _parse_condition(
    condition: str,
    grammar: _Grammar,
    restriction_code: Optional[RestrictionCode],
    existing: Optional[RaceRestrictions],
) -> Optional[RaceRestrictions]:
    m = grammar.pattern.fullmatch(condition)
    if not m:
        return None

    sexes = _sexes_bits(m, grammar.sex_offset)

    offset = grammar.age_offset
    first_age = m.group(offset)
    later_ages = [m.group(offset + n) for n in (8, 6, 4, 2)]
    years_old = m.group(offset + 9)
    and_older = m.group(offset + 10)
    alt_first_age = m.group(offset + 12)
    alt_and_older = m.group(offset + 13)
    false_positive = m.group(offset + 15)

    # "3 year olds 119 lbs" is a weight clause, unless nothing else has been found yet
    if false_positive and false_positive.strip() and existing is not None:
        return None

    if years_old is not None:
        if first_age is None:
            return None
        max_age = None
        if and_older is not None:
            max_age = AND_UP
        else:
            max_age = next((int(age) for age in later_ages if age is not None), None)
        return RaceRestrictions.from_code(restriction_code, int(first_age), max_age, sexes)

    if alt_first_age is not None and alt_and_older is not None:
        return RaceRestrictions.from_code(restriction_code, int(alt_first_age), AND_UP, sexes)

    # a sex clause on its own still restricts the race, e.g. "for fillies & mares"
    if sexes != ALL_SEXES:
        return RaceRestrictions.from_code(restriction_code, None, None, sexes)

    return None


def _sexes_bits(m: re.Match, seed: int) -> int:
    # "... all fillies & mares allowed 3 lbs" is a weight allowance, not a restriction
    false_positive = m.group(7 + seed)
    first = m.group(2 + seed)
    if (false_positive and false_positive.strip()) or first is None:
        return ALL_SEXES

    sexes = _FIRST_SEX_BITS.get(first, 0)
    if m.group(4 + seed) == "geldings":
        sexes += 2
    third = m.group(6 + seed)
    if third is not None:
        sexes += _OTHER_SEX_BITS.get(third, 0)
    return sexes


def merge_restrictions(
    restriction_code: Optional[RestrictionCode],
    condition: RaceRestrictions,
    existing: RaceRestrictions,
) -> RaceRestrictions:
    """Combine two alternative conditions ("3yo fillies or 4yo mares")."""
    min_ages = [a for a in (existing.min_age, condition.min_age) if a is not None]
    min_age = min(min_ages) if min_ages else None

    max_age = _merge_max_age(existing.max_age, condition.max_age)

    if existing.sexes == condition.sexes:
        sexes = existing.sexes
    else:
        sexes = min(ALL_SEXES, existing.sexes | condition.sexes)

    return RaceRestrictions.from_code(restriction_code, min_age, max_age, sexes)


def _merge_max_age(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    if a < 0 or b < 0:
        return AND_UP
    return max(a, b)
