"""
Shared-class deduplication.

Every node's residual inline CSS is observed once; any exact string seen at
least ``min_repeat`` times becomes one generated class (``fr-xxxxxx``), and
every occurrence is replaced by a reference to it.
"""

import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def fnv1a(text: str) -> int:
    h = 2166136261
    for ch in text:
        h ^= ord(ch)
        h = (h * 16777619) & 0xFFFFFFFF
    return h


def to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def shared_class_name(css: str) -> str:
    return "fr-" + to_base36(fnv1a(css))[:6]


class SharedClassPool:
    """
    Build-scoped pool: exact css string → class name.

    Usage is two-phase. While collecting, ``apply()`` only counts and hands
    the css back untouched; after ``freeze()`` it swaps promoted strings
    for their class.
    """

    def __init__(self, min_repeat: int = 2):
        self.min_repeat = max(1, int(min_repeat))
        self.counts: Dict[str, int] = {}
        self.names: Dict[str, str] = {}
        self.frozen = False

    def observe(self, css: str):
        if css:
            self.counts[css] = self.counts.get(css, 0) + 1

    def freeze(self):
        """Promote every string seen min_repeat times. Later calls are no-ops."""
        if self.frozen:
            return
        taken = set()
        for css, count in self.counts.items():
            if count < self.min_repeat:
                continue
            name = shared_class_name(css)
            suffix = 2
            while name in taken:
                name = f"{shared_class_name(css)}-{suffix}"
                suffix += 1
            taken.add(name)
            self.names[css] = name
        self.frozen = True
        logger.debug("[SHARED] %d shared classes from %d distinct blocks", len(self.names), len(self.counts))

    def apply(self, css: str) -> Tuple[Optional[str], str]:
        if not css:
            return None, ""
        if not self.frozen:
            self.observe(css)
            return None, css
        name = self.names.get(css)
        if name:
            return name, ""
        return None, css

    @property
    def classes(self) -> List[Tuple[str, str, int]]:
        """(name, css, usage) for every promoted string."""
        return [(name, css, self.counts.get(css, 0)) for css, name in self.names.items()]

    def to_css(self, scope: str = "[data-figma-render]") -> str:
        prefix = f"{scope} " if scope else ""
        return "\n".join(f"{prefix}.{name}{{{css}}}" for css, name in self.names.items())


def build_shared_classes(css_list, min_repeat: int = 2) -> SharedClassPool:
    """Observe a list of residual css strings and return the frozen pool."""
    pool = SharedClassPool(min_repeat)
    for css in css_list:
        pool.observe(css)
    pool.freeze()
    return pool
