"""Built-in track registry: chart names and codes of North American racetracks.

Charts print the track name in upper case ("AQUEDUCT"); links and summaries
use the track code. Some tracks have been renamed or share a code with an
earlier track; those carry the earlier code as `canonical`.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

from racechart.models import Track

logger = logging.getLogger(__name__)

# Alternative chart names, mapped to the registered name (lowercase)
TRACK_ALIASES = {
    "philadelphia park": "parx racing",
    "calder race course": "gulfstream park west",
    "hollywood park": "betfair hollywood park",
    "presque isle downs": "presque isle downs & casino",
    "the meadowlands": "meadowlands",
    "churchill": "churchill downs",
}

# code, name, country, state, city, canonical
_TRACKS = [
    ("AQU", "Aqueduct", "USA", "NY", "South Ozone Park", None),
    ("BEL", "Belmont Park", "USA", "NY", "Elmont", None),
    ("SAR", "Saratoga", "USA", "NY", "Saratoga Springs", None),
    ("FL", "Finger Lakes", "USA", "NY", "Farmington", None),
    ("CD", "Churchill Downs", "USA", "KY", "Louisville", None),
    ("KEE", "Keeneland", "USA", "KY", "Lexington", None),
    ("ELP", "Ellis Park", "USA", "KY", "Henderson", None),
    ("KD", "Kentucky Downs", "USA", "KY", "Franklin", None),
    ("TP", "Turfway Park", "USA", "KY", "Florence", None),
    ("GP", "Gulfstream Park", "USA", "FL", "Hallandale Beach", None),
    ("GPW", "Gulfstream Park West", "USA", "FL", "Miami Gardens", "CRC"),
    ("TAM", "Tampa Bay Downs", "USA", "FL", "Oldsmar", None),
    ("SA", "Santa Anita Park", "USA", "CA", "Arcadia", None),
    ("DMR", "Del Mar", "USA", "CA", "Del Mar", None),
    ("HOL", "Betfair Hollywood Park", "USA", "CA", "Inglewood", None),
    ("LA", "Los Alamitos", "USA", "CA", "Cypress", None),
    ("GG", "Golden Gate Fields", "USA", "CA", "Berkeley", None),
    ("PRX", "Parx Racing", "USA", "PA", "Bensalem", "PHA"),
    ("PEN", "Penn National", "USA", "PA", "Grantville", None),
    ("PID", "Presque Isle Downs & Casino", "USA", "PA", "Erie", None),
    ("PIM", "Pimlico", "USA", "MD", "Baltimore", None),
    ("LRL", "Laurel Park", "USA", "MD", "Laurel", None),
    ("TIM", "Timonium", "USA", "MD", "Timonium", None),
    ("MTH", "Monmouth Park", "USA", "NJ", "Oceanport", None),
    ("MED", "Meadowlands", "USA", "NJ", "East Rutherford", None),
    ("DEL", "Delaware Park", "USA", "DE", "Wilmington", None),
    ("CT", "Charles Town", "USA", "WV", "Charles Town", None),
    ("MNR", "Mountaineer", "USA", "WV", "Chester", None),
    ("OP", "Oaklawn Park", "USA", "AR", "Hot Springs", None),
    ("FG", "Fair Grounds", "USA", "LA", "New Orleans", None),
    ("DED", "Delta Downs", "USA", "LA", "Vinton", None),
    ("EVD", "Evangeline Downs", "USA", "LA", "Opelousas", None),
    ("LAD", "Louisiana Downs", "USA", "LA", "Bossier City", None),
    ("AP", "Arlington", "USA", "IL", "Arlington Heights", None),
    ("HAW", "Hawthorne", "USA", "IL", "Cicero", None),
    ("IND", "Indiana Grand", "USA", "IN", "Shelbyville", None),
    ("BTP", "Belterra Park", "USA", "OH", "Cincinnati", None),
    ("TDN", "Thistledown", "USA", "OH", "North Randall", None),
    ("MVR", "Mahoning Valley", "USA", "OH", "Austintown", None),
    ("CBY", "Canterbury Park", "USA", "MN", "Shakopee", None),
    ("PRM", "Prairie Meadows", "USA", "IA", "Altoona", None),
    ("LS", "Lone Star Park", "USA", "TX", "Grand Prairie", None),
    ("RET", "Retama Park", "USA", "TX", "Selma", None),
    ("SUN", "Sunland Park", "USA", "NM", "Sunland Park", None),
    ("RUI", "Ruidoso Downs", "USA", "NM", "Ruidoso Downs", None),
    ("ZIA", "Zia Park", "USA", "NM", "Hobbs", None),
    ("TUP", "Turf Paradise", "USA", "AZ", "Phoenix", None),
    ("EMD", "Emerald Downs", "USA", "WA", "Auburn", None),
    ("RP", "Remington Park", "USA", "OK", "Oklahoma City", None),
    ("WRD", "Will Rogers Downs", "USA", "OK", "Claremore", None),
    ("CLS", "Colonial Downs", "USA", "VA", "New Kent", None),
    ("SUF", "Suffolk Downs", "USA", "MA", "East Boston", None),
    ("WO", "Woodbine", "CAN", "ON", "Toronto", None),
    ("FE", "Fort Erie", "CAN", "ON", "Fort Erie", None),
    ("HST", "Hastings Racecourse", "CAN", "BC", "Vancouver", None),
    ("NP", "Northlands Park", "CAN", "AB", "Edmonton", None),
    ("ASD", "Assiniboia Downs", "CAN", "MB", "Winnipeg", None),
]


def normalize_track_name(name: str) -> str:
    """Lowercase, collapse whitespace and apply aliases."""
    if not name:
        return ""
    n = " ".join(name.lower().split())
    return TRACK_ALIASES.get(n, n)


@dataclass(frozen=True)
class TrackRegistry:
    """Read-only lookup of tracks by chart name or code."""

    by_name: dict[str, Track]
    by_code: dict[str, Track]

    @classmethod
    def from_tracks(cls, tracks: Iterable[Track]) -> "TrackRegistry":
        tracks = list(tracks)
        return cls(
            by_name={normalize_track_name(t.name): t for t in tracks},
            by_code={t.code: t for t in tracks},
        )

    @classmethod
    def default(cls) -> "TrackRegistry":
        return cls.from_tracks(
            Track(code=code, name=name, country=country, state=state, city=city, canonical=canonical)
            for code, name, country, state, city, canonical in _TRACKS
        )

    def for_name(self, name: str) -> Optional[Track]:
        return self.by_name.get(normalize_track_name(name))

    def for_code(self, code: str) -> Optional[Track]:
        return self.by_code.get(code.upper()) if code else None

    def __len__(self) -> int:
        return len(self.by_code)


@lru_cache
def get_track_registry() -> TrackRegistry:
    return TrackRegistry.default()
