# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category utilities for Salon Ledger.

Revenue and expense categories are fixed configuration data: an ordered
list of names, each with a stable display colour used by the charts.

Responsibilities:
- Expose the default salon category set.
- Load an alternative category set from a user-maintained CSV file.
- Resolve unknown category names to the designated fallback category,
  so that aggregation never loses an amount.
"""

from dataclasses import dataclass
from typing import Literal, Optional

import pandas as pd

CategoryKind = Literal["revenue", "expense"]

FALLBACK_CATEGORY = "Divers"


@dataclass(frozen=True)
class Category:
    """A category name with its display colour (hex)."""

    name: str
    color: str


@dataclass(frozen=True)
class CategorySet:
    """
    Immutable revenue and expense category lists.

    Attributes
    ----------
    revenue:
        Ordered revenue categories (service types).
    expense:
        Ordered expense categories (suppliers, training, misc).
    revenue_fallback, expense_fallback:
        Names of the categories receiving amounts whose category is not
        part of the set. They must be members of their respective lists.
    """

    revenue: tuple[Category, ...]
    expense: tuple[Category, ...]
    revenue_fallback: str = FALLBACK_CATEGORY
    expense_fallback: str = FALLBACK_CATEGORY

    def __post_init__(self) -> None:
        if self.revenue_fallback not in self.revenue_names:
            raise ValueError(
                f"Revenue fallback category {self.revenue_fallback!r} "
                "is not a revenue category."
            )
        if self.expense_fallback not in self.expense_names:
            raise ValueError(
                f"Expense fallback category {self.expense_fallback!r} "
                "is not an expense category."
            )

    @property
    def revenue_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.revenue)

    @property
    def expense_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.expense)

    def names(self, kind: CategoryKind) -> tuple[str, ...]:
        return self.revenue_names if kind == "revenue" else self.expense_names

    def color_of(self, kind: CategoryKind, name: str) -> str:
        """Return the display colour of a category (grey if unknown)."""
        pool = self.revenue if kind == "revenue" else self.expense
        for c in pool:
            if c.name == name:
                return c.color
        return "#6b7280"

    def resolve(self, kind: CategoryKind, name: Optional[str]) -> str:
        """Return `name` if it belongs to the set, else the fallback category."""
        if name is not None and name in self.names(kind):
            return name
        if kind == "revenue":
            return self.revenue_fallback
        return self.expense_fallback


DEFAULT_CATEGORIES = CategorySet(
    revenue=(
        Category("Manucure & Pédicure", "#ec4899"),
        Category("Spray-Tanning", "#eab308"),
        Category("Blanchiment dentaire", "#06b6d4"),
        Category("Soins & Lissages", "#10b981"),
        Category("Produits", "#f97316"),
        Category("Divers", "#8b5cf6"),
        Category("Formation ongles", "#f43f5e"),
        Category("Formation spray tan", "#84cc16"),
        Category("Formation soin-lissage", "#14b8a6"),
        Category("Formation blanchiment dentaire", "#6366f1"),
    ),
    expense=(
        Category("Fournisseur ongle", "#ef4444"),
        Category("Fournisseur cheveux", "#a855f7"),
        Category("Fournisseur spray tan", "#f59e0b"),
        Category("Fournisseur blanchiment", "#3b82f6"),
        Category("Aménagement du salon", "#9ca3af"),
        Category("Formation ongles", "#be123c"),
        Category("Formation spray tan", "#4d7c0f"),
        Category("Formation soin-lissage", "#0f766e"),
        Category("Formation blanchiment dentaire", "#4338ca"),
        Category("Produits", "#c2410c"),
        Category("Divers", "#6b7280"),
    ),
)


def load_category_set(path: str) -> CategorySet:
    """Load a category set from CSV.

    Expected structure
    ------------------
    The CSV must contain the columns:
        - 'kind':  'revenue' or 'expense'
        - 'name':  category name
        - 'color': display colour (optional, defaults to grey)

    An optional boolean-like column 'fallback' marks the fallback category
    of each kind. When absent, a category named 'Divers' is used, or the
    last category of the kind.

    Column names are matched case-insensitively and trimmed.

    Args:
        path: Path to the CSV file.

    Returns:
        A CategorySet preserving the file order within each kind.

    Raises:
        ValueError: if a required column is missing, a kind is unknown, or
            one of the two kinds has no category.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = {"kind", "name"}.difference(df.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"Category file is missing required column(s): {cols}")

    if "color" not in df.columns:
        df["color"] = "#6b7280"
    if "fallback" not in df.columns:
        df["fallback"] = False

    revenue: list[Category] = []
    expense: list[Category] = []
    fallbacks: dict[str, str] = {}

    for row in df.itertuples(index=False):
        kind = str(row.kind).strip().lower()
        name = str(row.name).strip()
        color = str(row.color).strip() if not pd.isna(row.color) else "#6b7280"
        if kind == "revenue":
            revenue.append(Category(name, color))
        elif kind == "expense":
            expense.append(Category(name, color))
        else:
            raise ValueError(f"Unknown category kind {row.kind!r} in {path}")

        if str(row.fallback).strip().lower() in {"1", "true", "yes", "x"}:
            fallbacks[kind] = name

    if not revenue or not expense:
        raise ValueError(
            f"Category file {path} must define at least one revenue "
            "and one expense category."
        )

    def _default_fallback(items: list[Category]) -> str:
        names = [c.name for c in items]
        return FALLBACK_CATEGORY if FALLBACK_CATEGORY in names else names[-1]

    return CategorySet(
        revenue=tuple(revenue),
        expense=tuple(expense),
        revenue_fallback=fallbacks.get("revenue", _default_fallback(revenue)),
        expense_fallback=fallbacks.get("expense", _default_fallback(expense)),
    )
