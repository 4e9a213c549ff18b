"""Frozen lookup tables built from the packaged TOML resources.

Every mapper and engine receives its tables as a constructor argument, so
tests and callers can swap any table without touching module state. The
``from_mapping`` constructors validate the payload and raise
:class:`TableError` for unknown element names, negative weights or
dangling references between tables.
"""

from __future__ import annotations

import re
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import AbstractSet, Any, Iterable, Mapping, MutableMapping, Sequence

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from wuxing_core.elements import ELEMENTS, ElementDistribution
from wuxing_core.numeric import coerce_float, coerce_optional_float
from wuxing_tea import data as _data

__all__ = [
    "CompoundTables",
    "ContextOverride",
    "EffectsTables",
    "ElementAdjustment",
    "ElementDefinition",
    "FlavorCategory",
    "FlavorTables",
    "GeographyBand",
    "GeographyFactor",
    "GeographyTables",
    "Heuristic",
    "NamedCombination",
    "PairProfile",
    "PatternClause",
    "ProcessingCombination",
    "ProcessingMethod",
    "ProcessingTables",
    "RatioBand",
    "SignaturePattern",
    "TableError",
    "TeaTables",
    "TeaTypeTables",
    "ThermalBand",
    "ThermalLabel",
    "ThermalTables",
    "load_default_tables",
    "normalise_tag",
    "normalise_term",
]


class TableError(ValueError):
    """Raised when a lookup table is malformed."""


_WHITESPACE = re.compile(r"\s+")


def normalise_term(value: object) -> str:
    """Lowercase and trim a flavor descriptor."""

    return str(value).strip().lower()


def normalise_tag(value: object) -> str:
    """Lowercase, trim and hyphenate whitespace runs in a processing tag."""

    return _WHITESPACE.sub("-", str(value).strip().lower())


def _distribution(payload: Any, where: str) -> ElementDistribution:
    if not isinstance(payload, MappingABC):
        raise TableError(f"{where} must be a table of element weights")
    try:
        distribution = ElementDistribution.from_mapping(payload, strict=True)
    except KeyError as exc:
        raise TableError(f"{where} references unknown element {exc.args[0]!r}") from exc
    if any(value < 0.0 for value in distribution):
        raise TableError(f"{where} contains a negative weight")
    return distribution


def _deltas(payload: Any, where: str) -> Mapping[str, float]:
    if not isinstance(payload, MappingABC):
        raise TableError(f"{where} must be a table of element deltas")
    deltas: dict[str, float] = {}
    for key, value in payload.items():
        element = str(key).strip().lower()
        if element not in ELEMENTS:
            raise TableError(f"{where} references unknown element {key!r}")
        deltas[element] = coerce_float(value)
    return MappingProxyType(deltas)


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key, {})
    if not isinstance(value, MappingABC):
        raise TableError(f"[{key}] must be a table")
    return value


def _array(payload: Mapping[str, Any], key: str) -> Sequence[Mapping[str, Any]]:
    value = payload.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, MappingABC) for item in value):
        raise TableError(f"[[{key}]] must be an array of tables")
    return value


def _strings(values: Any, where: str) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise TableError(f"{where} must be a list of strings")
    return tuple(normalise_term(item) for item in values)


def _read_toml(resource: Any) -> Mapping[str, Any]:
    with resource.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise TableError(f"Invalid TOML in {resource}") from exc
    return payload


# ---------------------------------------------------------------------------
# flavor
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FlavorCategory:
    name: str
    primary: str
    secondary: str | None
    distribution: Mapping[str, float]


@dataclass(frozen=True, slots=True)
class Heuristic:
    terms: tuple[str, ...]
    elements: ElementDistribution

    def matches(self, term: str) -> bool:
        return any(fragment in term for fragment in self.terms)


@dataclass(frozen=True, slots=True)
class ContextOverride:
    term: str
    siblings: frozenset[str]
    elements: ElementDistribution
    tcm_flavors: Mapping[str, float]

    def applies(self, term: str, context: frozenset[str]) -> bool:
        return term == self.term and not self.siblings.isdisjoint(context)


@dataclass(frozen=True, slots=True)
class NamedCombination:
    name: str
    flavors: frozenset[str]
    elements: ElementDistribution


@dataclass(frozen=True, slots=True)
class PatternClause:
    """One alternative of a signature pattern; every declared part must hold."""

    any_of: tuple[frozenset[str], ...] = ()
    all_of: frozenset[str] = frozenset()
    none_of: frozenset[str] = frozenset()
    contains: tuple[tuple[tuple[str, ...], int], ...] = ()

    def matches(self, terms: Sequence[str]) -> bool:
        present = frozenset(terms)
        if not all(not group.isdisjoint(present) for group in self.any_of):
            return False
        if not self.all_of <= present:
            return False
        if not self.none_of.isdisjoint(present):
            return False
        for fragments, minimum in self.contains:
            hits = sum(1 for term in present if any(fragment in term for fragment in fragments))
            if hits < minimum:
                return False
        return True


@dataclass(frozen=True, slots=True)
class SignaturePattern:
    name: str
    elements: ElementDistribution
    clauses: tuple[PatternClause, ...]

    def matches(self, terms: Sequence[str]) -> bool:
        return any(clause.matches(terms) for clause in self.clauses)


@dataclass(frozen=True, slots=True)
class FlavorTables:
    tcm_flavors: Mapping[str, ElementDistribution]
    direct_flavors: Mapping[str, str]
    categories: Mapping[str, FlavorCategory]
    notes: Mapping[str, str]
    descriptors: Mapping[str, ElementDistribution]
    heuristics: tuple[Heuristic, ...] = ()
    context: tuple[ContextOverride, ...] = ()
    combinations: tuple[NamedCombination, ...] = ()
    patterns: tuple[SignaturePattern, ...] = ()

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        patterns: Mapping[str, Any] | None = None,
    ) -> "FlavorTables":
        tcm_flavors = {
            normalise_term(name): _distribution(values, f"tcm_flavors.{name}")
            for name, values in _section(payload, "tcm_flavors").items()
        }
        if not tcm_flavors:
            raise TableError("[tcm_flavors] must define at least one flavor")

        def check_flavor(name: Any, where: str) -> str:
            flavor = normalise_term(name)
            if flavor not in tcm_flavors:
                raise TableError(f"{where} references unknown TCM flavor {name!r}")
            return flavor

        direct = {
            normalise_term(term): check_flavor(flavor, f"direct_flavors.{term}")
            for term, flavor in _section(payload, "direct_flavors").items()
        }

        categories: dict[str, FlavorCategory] = {}
        for name, entry in _section(payload, "categories").items():
            where = f"categories.{name}"
            if not isinstance(entry, MappingABC):
                raise TableError(f"{where} must be a table")
            mix = entry.get("distribution", {})
            if not isinstance(mix, MappingABC):
                raise TableError(f"{where}.distribution must be a table")
            secondary = entry.get("secondary")
            categories[normalise_term(name)] = FlavorCategory(
                name=normalise_term(name),
                primary=check_flavor(entry.get("primary"), where),
                secondary=check_flavor(secondary, where) if secondary is not None else None,
                distribution=MappingProxyType(
                    {
                        check_flavor(flavor, where): max(0.0, coerce_float(weight))
                        for flavor, weight in mix.items()
                    }
                ),
            )

        notes: dict[str, str] = {}
        for note, category in _section(payload, "notes").items():
            key = normalise_term(category)
            if key not in categories:
                raise TableError(f"notes.{note} references unknown category {category!r}")
            notes[normalise_term(note)] = key

        descriptors = {
            normalise_term(term): _distribution(values, f"descriptors.{term}")
            for term, values in _section(payload, "descriptors").items()
        }

        heuristics = tuple(
            Heuristic(
                terms=_strings(entry.get("terms"), "heuristics.terms"),
                elements=_distribution(entry.get("elements"), "heuristics.elements"),
            )
            for entry in _array(payload, "heuristics")
        )

        context = tuple(
            ContextOverride(
                term=normalise_term(entry.get("term", "")),
                siblings=frozenset(_strings(entry.get("siblings"), "context.siblings")),
                elements=_distribution(entry.get("elements"), "context.elements"),
                tcm_flavors=MappingProxyType(
                    {
                        check_flavor(flavor, "context.tcm_flavors"): coerce_float(weight)
                        for flavor, weight in dict(entry.get("tcm_flavors", {})).items()
                    }
                ),
            )
            for entry in _array(payload, "context")
        )

        combinations = tuple(
            NamedCombination(
                name=str(entry.get("name", "")),
                flavors=frozenset(_strings(entry.get("flavors"), "combinations.flavors")),
                elements=_distribution(entry.get("elements"), f"combinations.{entry.get('name')}"),
            )
            for entry in _array(payload, "combinations")
        )

        signature_patterns: tuple[SignaturePattern, ...] = ()
        if patterns is not None:
            signature_patterns = tuple(
                _signature_pattern(entry) for entry in _array(patterns, "patterns")
            )

        return cls(
            tcm_flavors=MappingProxyType(tcm_flavors),
            direct_flavors=MappingProxyType(direct),
            categories=MappingProxyType(categories),
            notes=MappingProxyType(notes),
            descriptors=MappingProxyType(descriptors),
            heuristics=heuristics,
            context=context,
            combinations=combinations,
            patterns=signature_patterns,
        )


def _signature_pattern(entry: Mapping[str, Any]) -> SignaturePattern:
    name = str(entry.get("name", ""))
    where = f"patterns.{name}"
    clauses: list[PatternClause] = []
    raw_clauses = entry.get("when", [])
    if not isinstance(raw_clauses, list) or not raw_clauses:
        raise TableError(f"{where} must declare at least one [[patterns.when]] clause")
    for raw in raw_clauses:
        if not isinstance(raw, MappingABC):
            raise TableError(f"{where}.when entries must be tables")
        contains: list[tuple[tuple[str, ...], int]] = []
        for item in raw.get("contains", []):
            if not isinstance(item, MappingABC):
                raise TableError(f"{where}.contains entries must be tables")
            minimum = int(coerce_float(item.get("min"), 1.0))
            contains.append((_strings(item.get("terms"), f"{where}.contains"), max(1, minimum)))
        clauses.append(
            PatternClause(
                any_of=tuple(
                    frozenset(_strings(group, f"{where}.any")) for group in raw.get("any", [])
                ),
                all_of=frozenset(_strings(raw.get("all"), f"{where}.all")),
                none_of=frozenset(_strings(raw.get("none"), f"{where}.none")),
                contains=tuple(contains),
            )
        )
    return SignaturePattern(
        name=name,
        elements=_distribution(entry.get("elements"), where),
        clauses=tuple(clauses),
    )


# ---------------------------------------------------------------------------
# processing and tea types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProcessingMethod:
    tag: str
    category: str
    elements: ElementDistribution
    description: str = ""
    examples: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ElementAdjustment:
    """``value * scale + offset``, capped at ``cap_ratio`` of ``cap_element``, then floored."""

    element: str
    scale: float = 1.0
    offset: float = 0.0
    cap_element: str | None = None
    cap_ratio: float = 1.0
    floor: float = 0.0

    def apply(self, values: MutableMapping[str, float]) -> None:
        value = values[self.element] * self.scale + self.offset
        if self.cap_element is not None:
            value = min(value, values[self.cap_element] * self.cap_ratio)
        values[self.element] = max(value, self.floor)


@dataclass(frozen=True, slots=True)
class ProcessingCombination:
    """Adjustments applied when every ``requires`` group has a member present.

    Adjustments run in declaration order, so a cap sees the values left by
    the adjustments before it.
    """

    name: str
    requires: tuple[frozenset[str], ...]
    adjustments: tuple[ElementAdjustment, ...]

    def matches(self, tags: AbstractSet[str]) -> bool:
        return all(not group.isdisjoint(tags) for group in self.requires)

    def apply(self, values: MutableMapping[str, float]) -> None:
        for adjustment in self.adjustments:
            adjustment.apply(values)


def _element_name(value: Any, where: str) -> str:
    element = str(value).strip().lower()
    if element not in ELEMENTS:
        raise TableError(f"{where} references unknown element {value!r}")
    return element


def _adjustment(raw: Any, where: str) -> ElementAdjustment:
    if not isinstance(raw, MappingABC):
        raise TableError(f"{where} must be a table")
    cap = raw.get("cap")
    cap_element: str | None = None
    cap_ratio = 1.0
    if cap is not None:
        if not isinstance(cap, MappingABC):
            raise TableError(f"{where}.cap must be a table")
        cap_element = _element_name(cap.get("element"), f"{where}.cap")
        cap_ratio = coerce_float(cap.get("ratio"), 1.0)
    return ElementAdjustment(
        element=_element_name(raw.get("element"), where),
        scale=coerce_float(raw.get("scale"), 1.0),
        offset=coerce_float(raw.get("offset"), 0.0),
        cap_element=cap_element,
        cap_ratio=cap_ratio,
        floor=coerce_float(raw.get("floor"), 0.0),
    )


def _processing_combination(entry: Mapping[str, Any], index: int) -> ProcessingCombination:
    name = str(entry.get("name", "")).strip()
    where = f"combinations.{name or index}"
    if not name:
        raise TableError(f"{where} needs a name")
    requires = tuple(
        frozenset(normalise_tag(tag) for tag in _strings(group, f"{where}.requires"))
        for group in entry.get("requires", [])
    )
    if not requires or not all(requires):
        raise TableError(f"{where}.requires must list non-empty tag groups")
    adjust = entry.get("adjust", [])
    if not isinstance(adjust, list) or not adjust:
        raise TableError(f"{where}.adjust must be a non-empty array")
    return ProcessingCombination(
        name=name,
        requires=requires,
        adjustments=tuple(
            _adjustment(raw, f"{where}.adjust[{position}]") for position, raw in enumerate(adjust)
        ),
    )


@dataclass(frozen=True, slots=True)
class ProcessingTables:
    methods: Mapping[str, ProcessingMethod]
    groups: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    combinations: tuple[ProcessingCombination, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ProcessingTables":
        methods: dict[str, ProcessingMethod] = {}
        for tag, entry in _section(payload, "methods").items():
            where = f"methods.{tag}"
            if not isinstance(entry, MappingABC):
                raise TableError(f"{where} must be a table")
            key = normalise_tag(tag)
            methods[key] = ProcessingMethod(
                tag=key,
                category=normalise_term(entry.get("category", "general")),
                elements=_distribution(entry.get("elements"), where),
                description=str(entry.get("description", "")),
                examples=tuple(str(item) for item in entry.get("examples", [])),
            )
        groups = {
            normalise_term(name): frozenset(normalise_tag(tag) for tag in tags)
            for name, tags in _section(payload, "groups").items()
        }
        combinations = tuple(
            _processing_combination(entry, index)
            for index, entry in enumerate(_array(payload, "combinations"))
        )
        return cls(
            methods=MappingProxyType(methods),
            groups=MappingProxyType(groups),
            combinations=combinations,
        )


@dataclass(frozen=True, slots=True)
class TeaTypeTables:
    profiles: Mapping[str, ElementDistribution]
    aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TeaTypeTables":
        profiles = {
            normalise_term(name): _distribution(values, f"profiles.{name}")
            for name, values in _section(payload, "profiles").items()
        }
        aliases: dict[str, str] = {}
        for alias, target in _section(payload, "aliases").items():
            key = normalise_term(target)
            if key not in profiles:
                raise TableError(f"aliases.{alias} references unknown tea type {target!r}")
            aliases[normalise_term(alias)] = key
        return cls(profiles=MappingProxyType(profiles), aliases=MappingProxyType(aliases))

    def resolve(self, tea_type: object) -> ElementDistribution | None:
        """Return the profile for ``tea_type``, following aliases."""

        if tea_type is None:
            return None
        key = normalise_term(tea_type)
        key = self.aliases.get(key, key)
        return self.profiles.get(key)


# ---------------------------------------------------------------------------
# geography
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GeographyBand:
    below: float | None
    label: str
    elements: ElementDistribution

    def contains(self, value: float) -> bool:
        return self.below is None or value < self.below


@dataclass(frozen=True, slots=True)
class GeographyFactor:
    name: str
    field: str
    weight: float
    bands: tuple[GeographyBand, ...]
    unit: str = ""
    absolute: bool = False

    def band_for(self, value: float) -> GeographyBand:
        reading = abs(value) if self.absolute else value
        for band in self.bands:
            if band.contains(reading):
                return band
        return self.bands[-1]


@dataclass(frozen=True, slots=True)
class GeographyTables:
    factors: tuple[GeographyFactor, ...]
    terrain: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    terrain_descriptions: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "GeographyTables":
        factors: list[GeographyFactor] = []
        for name, entry in _section(payload, "factors").items():
            where = f"factors.{name}"
            if not isinstance(entry, MappingABC):
                raise TableError(f"{where} must be a table")
            bands: list[GeographyBand] = []
            for index, raw in enumerate(entry.get("bands", [])):
                if not isinstance(raw, MappingABC):
                    raise TableError(f"{where}.bands entries must be tables")
                bands.append(
                    GeographyBand(
                        below=coerce_optional_float(raw.get("below")),
                        label=str(raw.get("label", f"band-{index}")),
                        elements=_distribution(raw.get("elements"), f"{where}.bands[{index}]"),
                    )
                )
            if not bands:
                raise TableError(f"{where} must declare at least one band")
            weight = coerce_float(entry.get("weight"), 0.0)
            if weight < 0.0:
                raise TableError(f"{where}.weight must not be negative")
            factors.append(
                GeographyFactor(
                    name=str(name),
                    field=str(entry.get("field", name)),
                    weight=weight,
                    bands=tuple(bands),
                    unit=str(entry.get("unit", "")),
                    absolute=bool(entry.get("absolute", False)),
                )
            )
        return cls(
            factors=tuple(factors),
            terrain=MappingProxyType({str(k): str(v) for k, v in _section(payload, "terrain").items()}),
            terrain_descriptions=MappingProxyType(
                {str(k): str(v) for k, v in _section(payload, "terrain_descriptions").items()}
            ),
        )


# ---------------------------------------------------------------------------
# thermal
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ThermalBand:
    below: float | None
    value: float


@dataclass(frozen=True, slots=True)
class ThermalLabel:
    label: str
    above: float | None = None
    below: float | None = None

    def matches(self, value: float) -> bool:
        if self.above is not None and value > self.above:
            return True
        if self.below is not None and value < self.below:
            return True
        return False


@dataclass(frozen=True, slots=True)
class ThermalTables:
    flavor: Mapping[str, float]
    processing: Mapping[str, float]
    climate: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    region: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    geography: Mapping[str, tuple[ThermalBand, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    labels: tuple[ThermalLabel, ...] = ()
    neutral_label: str = "Neutral"

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ThermalTables":
        def scalars(key: str, normalise) -> Mapping[str, float]:
            return MappingProxyType(
                {
                    normalise(name): max(-1.0, min(1.0, coerce_float(value)))
                    for name, value in _section(payload, key).items()
                }
            )

        geography: dict[str, tuple[ThermalBand, ...]] = {}
        for name, raw_bands in _section(payload, "geography").items():
            if not isinstance(raw_bands, list) or not raw_bands:
                raise TableError(f"geography.{name} must be a non-empty array of bands")
            geography[str(name)] = tuple(
                ThermalBand(
                    below=coerce_optional_float(band.get("below")),
                    value=coerce_float(band.get("value")),
                )
                for band in raw_bands
            )

        labels = tuple(
            ThermalLabel(
                label=str(entry.get("label", "")),
                above=coerce_optional_float(entry.get("above")),
                below=coerce_optional_float(entry.get("below")),
            )
            for entry in _array(payload, "labels")
        )
        return cls(
            flavor=scalars("flavor", normalise_term),
            processing=scalars("processing", normalise_tag),
            climate=scalars("climate", normalise_tag),
            region=scalars("region", normalise_tag),
            geography=MappingProxyType(geography),
            labels=labels,
            neutral_label=str(payload.get("neutral_label", "Neutral")),
        )

    def label_for(self, value: float) -> str:
        for label in self.labels:
            if label.matches(value):
                return label.label
        return self.neutral_label


# ---------------------------------------------------------------------------
# compounds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RatioBand:
    name: str
    deltas: Mapping[str, float]
    lower: float | None = None
    inclusive: bool = True

    def contains(self, ratio: float) -> bool:
        if self.lower is None:
            return True
        return ratio >= self.lower if self.inclusive else ratio > self.lower


@dataclass(frozen=True, slots=True)
class CompoundTables:
    caffeine_shares: ElementDistribution
    theanine_shares: ElementDistribution
    ratio_bands: tuple[RatioBand, ...]

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "CompoundTables":
        bands = tuple(
            RatioBand(
                name=str(entry.get("name", "")),
                deltas=_deltas(entry.get("deltas", {}), f"ratio_bands.{entry.get('name')}"),
                lower=coerce_optional_float(entry.get("min")),
                inclusive=bool(entry.get("inclusive", True)),
            )
            for entry in _array(payload, "ratio_bands")
        )
        if not bands or bands[-1].lower is not None:
            raise TableError("[[ratio_bands]] must end with an unbounded band")
        return cls(
            caffeine_shares=_distribution(
                _section(payload, "caffeine").get("shares"), "caffeine.shares"
            ),
            theanine_shares=_distribution(
                _section(payload, "theanine").get("shares"), "theanine.shares"
            ),
            ratio_bands=bands,
        )

    def band_for(self, ratio: float) -> RatioBand:
        for band in self.ratio_bands:
            if band.contains(ratio):
                return band
        return self.ratio_bands[-1]


# ---------------------------------------------------------------------------
# effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ElementDefinition:
    key: str
    name: str
    chinese_name: str
    season: str
    description: str


@dataclass(frozen=True, slots=True)
class PairProfile:
    name: str
    effect: str


@dataclass(frozen=True, slots=True)
class EffectsTables:
    elements: Mapping[str, ElementDefinition]
    season_order: tuple[str, ...]
    seasonal_strengths: Mapping[str, Mapping[str, float]]
    pairs: Mapping[frozenset[str], PairProfile]

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "EffectsTables":
        elements: dict[str, ElementDefinition] = {}
        for key, entry in _section(payload, "elements").items():
            element = normalise_term(key)
            if element not in ELEMENTS:
                raise TableError(f"elements.{key} is not an element")
            elements[element] = ElementDefinition(
                key=element,
                name=str(entry.get("name", element.title())),
                chinese_name=str(entry.get("chinese_name", "")),
                season=str(entry.get("season", "")),
                description=str(entry.get("description", "")),
            )

        seasons = _section(payload, "seasons")
        order = tuple(str(item) for item in seasons.get("order", []))
        strengths: dict[str, Mapping[str, float]] = {}
        for key, values in dict(seasons.get("strengths", {})).items():
            element = normalise_term(key)
            if element not in ELEMENTS:
                raise TableError(f"seasons.strengths.{key} is not an element")
            strengths[element] = MappingProxyType(
                {season: coerce_float(dict(values).get(season)) for season in order}
            )

        pairs: dict[frozenset[str], PairProfile] = {}
        for key, entry in _section(payload, "pairs").items():
            members = frozenset(part.strip().lower() for part in str(key).split("+"))
            if len(members) != 2 or not members <= frozenset(ELEMENTS):
                raise TableError(f"pairs.{key} must name two distinct elements")
            pairs[members] = PairProfile(
                name=str(entry.get("name", "")), effect=str(entry.get("effect", ""))
            )

        return cls(
            elements=MappingProxyType(elements),
            season_order=order,
            seasonal_strengths=MappingProxyType(strengths),
            pairs=MappingProxyType(pairs),
        )


# ---------------------------------------------------------------------------
# bundle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TeaTables:
    """Every table the engine consumes, bundled for convenient injection."""

    flavor: FlavorTables
    processing: ProcessingTables
    tea_types: TeaTypeTables
    geography: GeographyTables
    thermal: ThermalTables
    compounds: CompoundTables
    effects: EffectsTables


@lru_cache(maxsize=1)
def load_default_tables() -> TeaTables:
    """Return the packaged tables, parsed once per process."""

    return TeaTables(
        flavor=FlavorTables.from_mapping(
            _read_toml(_data.FLAVOR_RESOURCE), _read_toml(_data.FLAVOR_PATTERNS_RESOURCE)
        ),
        processing=ProcessingTables.from_mapping(_read_toml(_data.PROCESSING_RESOURCE)),
        tea_types=TeaTypeTables.from_mapping(_read_toml(_data.TEA_TYPES_RESOURCE)),
        geography=GeographyTables.from_mapping(_read_toml(_data.GEOGRAPHY_RESOURCE)),
        thermal=ThermalTables.from_mapping(_read_toml(_data.THERMAL_RESOURCE)),
        compounds=CompoundTables.from_mapping(_read_toml(_data.COMPOUNDS_RESOURCE)),
        effects=EffectsTables.from_mapping(_read_toml(_data.EFFECTS_RESOURCE)),
    )
