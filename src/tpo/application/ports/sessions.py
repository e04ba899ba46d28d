from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol

from tpo.domain.catalog.entities import Product
from tpo.domain.common.ids import CompositionId
from tpo.domain.common.roles import Role
from tpo.domain.order.composition import OrderComposition


@dataclass(frozen=True)
class Notice:
    code: str
    message: str


class OptimisticConcurrencyError(Exception):
    pass


@dataclass(frozen=True)
class CompositionSession:
    """An editing session as stored; ``revision`` counts the saves it has been through."""

    composition: OrderComposition
    role: Role | None = None
    products: tuple[Product, ...] = ()
    notices: tuple[Notice, ...] = field(default_factory=tuple)
    revision: int = 0

    @property
    def composition_id(self) -> CompositionId:
        return self.composition.composition_id

    def with_composition(self, composition: OrderComposition) -> CompositionSession:
        if composition is self.composition:
            return self
        return replace(self, composition=composition)

    def apply_catalog(
        self,
        products: tuple[Product, ...],
        notices: tuple[Notice, ...],
        selection_version: int,
    ) -> CompositionSession:
        """Swap in a catalog fetched for ``selection_version``; stale catalogs are ignored."""
        if not self.composition.is_current(selection_version):
            return self
        return replace(self, products=products, notices=notices)


class CompositionStore(Protocol):
    def get(self, composition_id: CompositionId) -> CompositionSession | None: ...

    def save(self, session: CompositionSession) -> CompositionSession:
        """Store ``session`` if the stored revision still equals ``session.revision``.

        Returns the session with its next revision. Raises OptimisticConcurrencyError when
        another save landed first, or when a loaded session has since been deleted.
        """
        ...

    def delete(self, composition_id: CompositionId) -> None: ...
