from __future__ import annotations

from typing import Callable, List, Optional

from .typography import ShrinkPolicy

Measure = Callable[[str, float], float]


def font_ladder(policy: ShrinkPolicy) -> List[int]:
    """Sizes below the default, largest first, down to the floor inclusive."""
    sizes: List[int] = []
    size = policy.default_size - policy.step
    while size >= policy.min_size:
        sizes.append(size)
        size -= policy.step
    return sizes


def is_ladder_size(size: float, policy: ShrinkPolicy) -> bool:
    return size == policy.default_size or size in font_ladder(policy)


def overflow_ratio(overflow_height: float, container_height: float) -> float:
    if container_height <= 0:
        return float("inf")
    return (overflow_height - container_height) / container_height


def try_shrink(
    measure: Measure,
    candidate: str,
    container_height: float,
    overflow_height: float,
    policy: ShrinkPolicy,
    debug: bool = False,
) -> Optional[int]:
    """Return the largest ladder size at which ``candidate`` fits, or None.

    Only near misses are considered: when the overflow at the default size
    exceeds ``policy.tolerance`` the candidate must be split instead.
    """
    ratio = overflow_ratio(overflow_height, container_height)
    if ratio > policy.tolerance:
        return None

    for size in font_ladder(policy):
        height = measure(candidate, size)
        if height <= container_height:
            if debug:
                print(
                    f"[DEBUG] Shrink rescued {len(candidate)} chars at {size}px "
                    f"(overflow {ratio:.1%})"
                )
            return size

    if debug:
        print(f"[DEBUG] Shrink ladder exhausted for {len(candidate)} chars")
    return None
