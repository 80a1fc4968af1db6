"""
Targeting specifications for reach estimate requests.

A targeting spec is a JSON object of filter groups, for example::

    {"geo_locations": {"countries": ["US"]}, "age_min": 20, "age_max": 30}

Filter groups are ANDed together; the values inside one group are ORed.
See https://developers.facebook.com/docs/marketing-api/targeting-specs
"""

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from fb_reach.config.constants import GEO_LOCATIONS_KEY
from fb_reach.errors import TargetingSpecError

logger = logging.getLogger(__name__)

BUNDLED_PACKAGE = "fb_reach.targeting_specs"
US_STATES_FILE = "us_states.json"


@dataclass(frozen=True)
class TargetingSpec:
    """An immutable targeting spec, kept as the JSON text it was read from."""

    text: str
    source: Optional[str] = None

    def __post_init__(self):
        # Malformed specs fail here, before any request is made
        self.parsed  # noqa: B018

    @classmethod
    def from_text(cls, text: str, source: Optional[str] = None) -> "TargetingSpec":
        return cls(text=text, source=source)

    @classmethod
    def from_dict(
        cls, spec: Mapping[str, Any], source: Optional[str] = None
    ) -> "TargetingSpec":
        try:
            text = json.dumps(spec)
        except (TypeError, ValueError) as e:
            raise TargetingSpecError(f"Targeting spec is not JSON serializable: {e}") from e
        return cls(text=text, source=source)

    @property
    def parsed(self) -> Dict[str, Any]:
        """A fresh dict of the spec; changing it does not change the spec."""
        try:
            data = json.loads(self.text)
        except json.JSONDecodeError as e:
            label = f" in {self.source}" if self.source else ""
            raise TargetingSpecError(f"Malformed targeting spec{label}: {e}") from e
        if not isinstance(data, dict):
            raise TargetingSpecError("Targeting spec must be a JSON object")
        return data

    @property
    def minified(self) -> str:
        """Compact JSON text, as sent to the API."""
        return minify(self.text)

    @property
    def pretty(self) -> str:
        return json.dumps(self.parsed, indent=2)

    def __str__(self) -> str:
        return self.minified


SpecLike = Union[TargetingSpec, str, Mapping[str, Any]]


def minify(text: str) -> str:
    """Strip insignificant whitespace from JSON text."""
    try:
        return json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)
    except json.JSONDecodeError as e:
        raise TargetingSpecError(f"Malformed targeting spec: {e}") from e


def as_targeting_spec(spec: SpecLike) -> TargetingSpec:
    """Coerce JSON text or a mapping to a TargetingSpec."""
    if isinstance(spec, TargetingSpec):
        return spec
    if isinstance(spec, str):
        return TargetingSpec.from_text(spec)
    if isinstance(spec, Mapping):
        return TargetingSpec.from_dict(spec)
    raise TargetingSpecError(
        f"Expected a targeting spec, JSON text or mapping, got {type(spec).__name__}"
    )


def load_targeting_spec(path: Union[str, Path]) -> TargetingSpec:
    """Read a targeting spec file as-is."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TargetingSpecError(f"Could not read targeting spec {path}: {e}") from e
    logger.debug(f"Loaded targeting spec from {path}")
    return TargetingSpec.from_text(text, source=str(path))


def load_targeting_specs(paths: Iterable[Union[str, Path]]) -> List[TargetingSpec]:
    return [load_targeting_spec(path) for path in paths]


def bundled_spec(name: str) -> TargetingSpec:
    """Load one of the example specs shipped with the package."""
    if not name.endswith(".json"):
        name = f"{name}.json"
    try:
        text = resources.files(BUNDLED_PACKAGE).joinpath(name).read_text(
            encoding="utf-8"
        )
    except OSError as e:
        raise TargetingSpecError(f"No bundled targeting spec named {name}") from e
    return TargetingSpec.from_text(text, source=name)


def build_targeting_spec(
    countries: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
    age_min: Optional[int] = None,
    age_max: Optional[int] = None,
    genders: Optional[Sequence[int]] = None,
    relationship_statuses: Optional[Sequence[int]] = None,
    education_statuses: Optional[Sequence[int]] = None,
    **extra: Any,
) -> TargetingSpec:
    """
    Build a targeting spec from common filter groups.

    Args:
        countries: ISO 3166-1 alpha-2 country codes
        regions: Region keys, e.g. from us_states.json
        age_min: Minimum age
        age_max: Maximum age
        genders: 1 for men, 2 for women
        relationship_statuses: Relationship status ids
        education_statuses: Education status ids
        **extra: Any other filter groups, passed through unchanged

    Returns:
        TargetingSpec
    """
    geo_locations: Dict[str, Any] = {}
    if countries:
        geo_locations["countries"] = list(countries)
    if regions:
        geo_locations["regions"] = [{"key": str(key)} for key in regions]
    if not geo_locations and GEO_LOCATIONS_KEY not in extra:
        raise TargetingSpecError("A targeting spec needs at least one geo location")

    spec: Dict[str, Any] = {}
    if geo_locations:
        spec[GEO_LOCATIONS_KEY] = geo_locations
    optional = {
        "age_min": age_min,
        "age_max": age_max,
        "genders": list(genders) if genders else None,
        "relationship_statuses": (
            list(relationship_statuses) if relationship_statuses else None
        ),
        "education_statuses": list(education_statuses) if education_statuses else None,
    }
    spec.update({key: value for key, value in optional.items() if value is not None})
    spec.update(extra)
    return TargetingSpec.from_dict(spec)


def _with_geo_locations(
    base: Optional[SpecLike], geo_locations: Dict[str, Any], source: str
) -> TargetingSpec:
    spec = as_targeting_spec(base).parsed if base is not None else {}
    spec[GEO_LOCATIONS_KEY] = geo_locations
    return TargetingSpec.from_dict(spec, source=source)


def country_specs(
    countries: Iterable[str], base: Optional[SpecLike] = None
) -> List[TargetingSpec]:
    """One spec per country, each otherwise identical to ``base``."""
    return [
        _with_geo_locations(base, {"countries": [country]}, source=country)
        for country in countries
    ]


def load_region_keys(path: Optional[Union[str, Path]] = None) -> Dict[str, str]:
    """
    Load a region name to region key mapping.

    Defaults to the bundled mapping of US states (and DC) to their keys.
    """
    try:
        if path is None:
            text = resources.files(BUNDLED_PACKAGE).joinpath(US_STATES_FILE).read_text(
                encoding="utf-8"
            )
        else:
            text = Path(path).read_text(encoding="utf-8")
        data = json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        raise TargetingSpecError(f"Could not load region keys: {e}") from e

    if not isinstance(data, dict):
        raise TargetingSpecError("Region keys must be a JSON object of name to key")
    return {str(name): str(key) for name, key in data.items()}


def region_specs(
    region_keys: Mapping[str, str], base: Optional[SpecLike] = None
) -> List[TargetingSpec]:
    """One spec per region, each otherwise identical to ``base``."""
    return [
        _with_geo_locations(base, {"regions": [{"key": str(key)}]}, source=name)
        for name, key in region_keys.items()
    ]
