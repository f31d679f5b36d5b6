"""Per-field extraction results.

Optional fields (date, author, description...) must never abort an
article. Instead of try/except-and-ignore at every call site, selector
lookups return an ``Extracted`` value that is either present or absent,
with the reason kept for logging.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .rendering import PageElement, RenderedPage


logger = logging.getLogger(__name__)

Scope = Union[RenderedPage, PageElement]


@dataclass(frozen=True)
class Extracted:
    """Result of extracting one field."""
    value: Optional[str] = None
    error: Optional[str] = None

    @property
    def present(self) -> bool:
        return bool(self.value)

    def or_else(self, fallback: Optional[str]) -> Optional[str]:
        """Return the value when present, otherwise the fallback."""
        return self.value if self.present else fallback


ABSENT = Extracted()


async def first_text(scope: Scope, selector: Optional[str]) -> Extracted:
    """Text of the first element under ``scope`` matching ``selector``."""
    if not selector:
        return ABSENT
    try:
        element = await scope.query_one(selector)
        if element is None:
            return Extracted(error=f"no element matches {selector!r}")
        return Extracted(value=await element.text())
    except Exception as e:
        logger.debug("Text extraction failed for %r: %s", selector, e)
        return Extracted(error=str(e))


async def first_attribute(scope: Scope, selector: Optional[str], name: str) -> Extracted:
    """Attribute ``name`` of the first element under ``scope`` matching ``selector``."""
    if not selector:
        return ABSENT
    try:
        element = await scope.query_one(selector)
        if element is None:
            return Extracted(error=f"no element matches {selector!r}")
        value = await element.attribute(name)
        return Extracted(value=value.strip() if value else None)
    except Exception as e:
        logger.debug("Attribute extraction failed for %r[%s]: %s", selector, name, e)
        return Extracted(error=str(e))
