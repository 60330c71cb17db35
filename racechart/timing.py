"""Race times: text/millisecond conversion, fractionals, splits and estimates."""

import logging
import re
from typing import Optional, Sequence

from racechart.exceptions import InvalidFractionals
from racechart.models import FEET_PER_FURLONG, Fractional, PointOfCall, Split, lookup_compact

logger = logging.getLogger(__name__)

LENGTH_IN_FEET = 8.75

# "1:09.34", "23.12", "1:35", ":47.60"
_TIME = re.compile(r"^(?:(\d+)?:)?(\d{1,2})(?:\.(\d{1,3}))?$")


def parse_time_millis(text: Optional[str]) -> Optional[int]:
    """Convert a chart time to milliseconds; None when it is not a time."""
    if text is None:
        return None
    m = _TIME.match(text.strip())
    if not m:
        return None
    minutes = int(m.group(1)) if m.group(1) else 0
    seconds = int(m.group(2))
    fraction = m.group(3) or "0"
    millis = int(fraction.ljust(3, "0"))
    return (minutes * 60 + seconds) * 1000 + millis


def format_time(millis: Optional[int]) -> Optional[str]:
    """"m:ss.SS" from a minute upwards, else "ss.SS"."""
    if millis is None:
        return None
    hundredths = round(millis / 10)
    minutes, remainder = divmod(hundredths, 6000)
    seconds, fraction = divmod(remainder, 100)
    if minutes:
        return f"{minutes}:{seconds:02d}.{fraction:02d}"
    return f"{seconds}.{fraction:02d}"


def estimate_individual_time(
    leader: Fractional,
    point_of_call: Optional[PointOfCall],
    length_in_feet: float = LENGTH_IN_FEET,
) -> Fractional:
    """Estimate a starter's elapsed time at a checkpoint from the leader's time.

    The starter is assumed to cover its beaten lengths at the leader's
    average pace. Time and millis stay None when the starter's margin at the
    checkpoint is unknown.
    """
    lengths = _lengths_behind(point_of_call)
    millis = None
    if lengths is not None and leader.millis and leader.feet:
        feet_per_milli = leader.feet / leader.millis
        millis = int(leader.millis + (lengths * length_in_feet) / feet_per_milli)
    return Fractional(
        point=leader.point,
        text=leader.text,
        compact=leader.compact,
        feet=leader.feet,
        time=format_time(millis),
        millis=millis,
    )


def _lengths_behind(point_of_call: Optional[PointOfCall]) -> Optional[float]:
    if point_of_call is None or point_of_call.relative_position is None:
        return None
    relative = point_of_call.relative_position
    if relative.total_lengths_behind is not None:
        return relative.total_lengths_behind.lengths
    # leading at this call
    if relative.lengths_ahead is not None:
        return 0.0
    return None


def calculate_split(previous: Optional[Fractional], fractional: Fractional) -> Split:
    """The time taken between two consecutive fractionals."""
    if previous is None:
        return Split(
            point=fractional.point,
            text=fractional.text,
            compact=fractional.compact,
            feet=fractional.feet,
            time=fractional.time,
            millis=fractional.millis,
            from_text="Start",
            to_text=fractional.text,
        )

    feet = None
    if fractional.feet is not None and previous.feet is not None:
        feet = fractional.feet - previous.feet
    millis = None
    if fractional.millis is not None and previous.millis is not None:
        millis = fractional.millis - previous.millis

    return Split(
        point=fractional.point,
        text=f"{previous.text} to {fractional.text}",
        compact=_compact_for(feet),
        feet=feet,
        time=format_time(millis),
        millis=millis,
        from_text=previous.text,
        to_text=fractional.text,
    )


def _compact_for(feet: Optional[int]) -> Optional[str]:
    if feet is None:
        return None
    return lookup_compact(feet) or f"{feet / FEET_PER_FURLONG:.2f}f"


def splits_from_fractionals(fractionals: Sequence[Fractional]) -> list[Split]:
    splits = []
    previous = None
    for fractional in fractionals:
        splits.append(calculate_split(previous, fractional))
        previous = fractional
    return splits


def leader_fractionals(
    template: Sequence[Fractional], times: Sequence[str], final_time: Optional[str]
) -> list[Fractional]:
    """Fill a fractional template with the leader's printed times.

    `times` are the intermediate times in order; the last template entry is
    the finish and takes the final time. Intermediate checkpoints with no
    printed time are left out.
    """
    if not template:
        return []
    intermediate, finish = template[:-1], template[-1]
    if len(times) > len(intermediate):
        raise InvalidFractionals(
            f"{len(times)} fractional times for {len(intermediate)} intermediate points"
        )

    timed = list(zip(intermediate, times))
    if final_time is not None:
        timed.append((finish, final_time))

    filled = []
    for fractional, text in timed:
        millis = parse_time_millis(text)
        if millis is None:
            raise InvalidFractionals(f"Unable to parse fractional time: {text}")
        filled.append(
            Fractional(
                point=fractional.point,
                text=fractional.text,
                compact=fractional.compact,
                feet=fractional.feet,
                time=format_time(millis),
                millis=millis,
            )
        )
    return filled
