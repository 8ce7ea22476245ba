"""
Domain Model Library: immutable material and process tables.

Every calculator reads its physical constants from here through
DomainLibrary.lookup(category, key). Unknown keys never raise; they resolve
to the category's documented default record and the result carries
used_default=True so the caller can surface a warning.

The values are empirical shop-floor constants carried over from the
calculator catalog. Several of them (duty-cycle caps, heat-input
thresholds, load factors) have no published derivation and should be read
as calibration constants rather than textbook physics.

Tables are MappingProxyType views over frozen dataclasses, built once at
import and shared read-only by every calculation.
"""

import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Hashable, Mapping, NamedTuple

logger = logging.getLogger(__name__)

# Bump when any table value changes
LIBRARY_VERSION = "2025.02"


class Category(str, enum.Enum):
    THERMAL = "thermal"
    CUTTING = "cutting"
    LASER = "laser"
    QUALITY_GRADE = "quality_grade"
    PRIORITY = "priority"
    GAS_COMPATIBILITY = "gas_compatibility"
    SELECTION_MATERIAL = "selection_material"
    APPLICATION = "application"
    ARCHITECTURAL_MATERIAL = "architectural_material"
    ELEMENT = "element"
    EXPOSURE = "exposure"
    THERMAL_SUITABILITY = "thermal_suitability"
    QUALITY_CHARACTERISTICS = "quality_characteristics"
    CUTTING_CHART = "cutting_chart"


# ============================================================
# Record types
# ============================================================

@dataclass(frozen=True)
class ThermalProperties:
    thermal_conductivity: float   # W/m·K
    specific_heat: float          # J/kg·K
    density: float                # kg/m³
    melting_point: float          # °C
    thermal_diffusivity: float    # m²/s
    thermal_expansion: float      # 1/K
    absorptivity: float           # fiber laser
    yield_strength: float         # MPa
    elastic_modulus: float        # MPa
    haz_factor: float             # empirical HAZ width scaling


@dataclass(frozen=True)
class CuttingProperties:
    base_power_factor: float
    base_speed_factor: float
    optimal_power_density: float  # W/mm² per mm of thickness
    thermal_conductivity: float
    absorption_coefficient: float
    quality_factor: float


@dataclass(frozen=True)
class LaserSource:
    wavelength: float             # µm
    beam_quality: float           # M²
    efficiency_factor: float
    absorption: Mapping[str, float]  # material -> absorption multiplier


@dataclass(frozen=True)
class QualityGrade:
    power_multiplier: float
    speed_multiplier: float
    quality_score: float          # 1-10


@dataclass(frozen=True)
class PriorityAdjustment:
    power_multiplier: float
    speed_multiplier: float
    quality_factor: float         # scales predicted edge quality


@dataclass(frozen=True)
class GasCompatibility:
    optimal: tuple
    acceptable: tuple
    poor: tuple

    def rate(self, gas: str) -> str:
        if gas in self.optimal:
            return "optimal"
        if gas in self.acceptable:
            return "acceptable"
        return "poor"


@dataclass(frozen=True)
class SelectionMaterial:
    name: str
    cost_per_kg: float
    tensile_strength: float       # MPa
    yield_strength: float         # MPa
    corrosion_rating: float       # 0-10
    weldability: float
    machinability: float
    density: float                # g/cm³
    applications: tuple
    laser: str
    speed: str
    gas: str
    difficulty: str
    pros: tuple
    cons: tuple


@dataclass(frozen=True)
class ApplicationRequirement:
    min_strength: float
    min_corrosion_rating: float
    max_cost: float
    priorities: tuple


@dataclass(frozen=True)
class ArchitecturalMaterial:
    label: str
    tensile_strength: float       # MPa
    yield_strength: float         # MPa
    elastic_modulus: float        # MPa
    density: float                # kg/m³
    thermal_expansion: float      # 1e-6 /°C
    corrosion_resistance: str
    weldability: str
    machinability: str
    cost: str
    applications: tuple


@dataclass(frozen=True)
class ElementProfile:
    dead_load_factor: float       # kN/m²
    live_load_factor: float       # kN/m²
    connection_type: str
    spacing: str
    capacity_requirement: str
    sealing: str
    thermal_break: str


@dataclass(frozen=True)
class ExposureProfile:
    wind_pressure: float          # kPa
    temperature_range: float      # ±°C


@dataclass(frozen=True)
class SuitabilityRating:
    rating: str


@dataclass(frozen=True)
class QualityCharacteristics:
    base_quality: float
    surface_roughness_base: float  # Ra µm
    thermal_sensitivity: float
    defect_proneness: float
    stability_factor: float
    feature_weights: Mapping[str, float]


@dataclass(frozen=True)
class CuttingChart:
    # thickness (mm) -> laser power (W) -> cutting speed (mm/min)
    speeds: Mapping[float, Mapping[float, float]]
    # thickness (mm) -> seconds per pierce at 3 kW
    pierce_times: Mapping[float, float]

    @property
    def max_thickness(self) -> float:
        return max(self.speeds)


class LookupResult(NamedTuple):
    record: Any
    used_default: bool
    key: Hashable


def _frozen(table: dict) -> Mapping:
    return MappingProxyType(table)


# ============================================================
# Thermal properties (heat-affected zone model)
# ============================================================

THERMAL_PROPERTIES = _frozen({
    "steel": ThermalProperties(50, 490, 7850, 1538, 13e-6, 12e-6, 0.85, 250, 200000, 1.0),
    "stainless_steel": ThermalProperties(16, 500, 8000, 1400, 4e-6, 17e-6, 0.80, 205, 200000, 1.2),
    "aluminum": ThermalProperties(237, 896, 2700, 660, 97e-6, 23e-6, 0.75, 276, 70000, 0.8),
    "copper": ThermalProperties(401, 385, 8960, 1085, 117e-6, 17e-6, 0.70, 70, 110000, 1.5),
    "titanium": ThermalProperties(22, 520, 4500, 1668, 9e-6, 8.6e-6, 0.78, 275, 114000, 0.9),
    "brass": ThermalProperties(120, 380, 8500, 930, 37e-6, 19e-6, 0.72, 310, 100000, 1.1),
})

# ============================================================
# Cutting process (power-speed matching)
# ============================================================

CUTTING_PROPERTIES = _frozen({
    "steel": CuttingProperties(0.8, 1.0, 2.5, 50, 0.85, 0.85),
    "stainless_steel": CuttingProperties(1.0, 0.8, 3.0, 16, 0.75, 0.90),
    "aluminum": CuttingProperties(1.2, 1.5, 4.0, 237, 0.65, 0.80),
    "copper": CuttingProperties(1.5, 1.2, 5.0, 401, 0.60, 0.75),
    "titanium": CuttingProperties(1.1, 0.7, 3.5, 22, 0.80, 0.85),
    "brass": CuttingProperties(1.3, 1.1, 4.5, 120, 0.70, 0.80),
})

LASER_SOURCES = _frozen({
    "fiber": LaserSource(1.06, 1.1, 0.9, _frozen({
        "steel": 1.0, "stainless_steel": 1.0, "aluminum": 0.8,
        "copper": 0.7, "titanium": 1.0, "brass": 0.8,
    })),
    "co2": LaserSource(10.6, 1.2, 0.7, _frozen({
        "steel": 0.8, "stainless_steel": 0.8, "aluminum": 1.2,
        "copper": 1.3, "titanium": 0.9, "brass": 1.1,
    })),
    "diode": LaserSource(0.98, 1.5, 0.8, _frozen({
        "steel": 0.9, "stainless_steel": 0.9, "aluminum": 0.7,
        "copper": 0.6, "titanium": 0.9, "brass": 0.7,
    })),
})

QUALITY_GRADES = _frozen({
    "rough": QualityGrade(1.2, 1.5, 6.0),
    "standard": QualityGrade(1.0, 1.0, 7.5),
    "precision": QualityGrade(0.8, 0.7, 9.0),
    "mirror": QualityGrade(0.6, 0.5, 10.0),
})

PRIORITY_ADJUSTMENTS = _frozen({
    "speed": PriorityAdjustment(1.2, 1.4, 0.85),
    "quality": PriorityAdjustment(0.8, 0.7, 1.15),
    "efficiency": PriorityAdjustment(0.9, 1.1, 0.95),
    "balanced": PriorityAdjustment(1.0, 1.0, 1.0),
})

GAS_COMPATIBILITY = _frozen({
    "steel": GasCompatibility(("oxygen",), ("air",), ("nitrogen", "argon")),
    "stainless_steel": GasCompatibility(("nitrogen",), ("argon",), ("oxygen", "air")),
    "aluminum": GasCompatibility(("nitrogen", "argon"), ("air",), ("oxygen",)),
    "copper": GasCompatibility(("nitrogen", "argon"), ("air",), ("oxygen",)),
    "titanium": GasCompatibility(("argon",), ("nitrogen",), ("oxygen", "air")),
    "brass": GasCompatibility(("nitrogen",), ("air", "argon"), ("oxygen",)),
})

# ============================================================
# Material selection
# ============================================================

SELECTION_MATERIALS = _frozen({
    "carbon_steel": SelectionMaterial(
        "Carbon Steel", 2.5, 400, 250, 1, 9, 8, 7.85,
        ("structural", "automotive"), "fiber", "fast", "oxygen", "easy",
        ("Low cost", "High strength", "Easy to weld", "Widely available"),
        ("Poor corrosion resistance", "Requires coating for outdoor use"),
    ),
    "stainless_steel_304": SelectionMaterial(
        "Stainless Steel 304", 8.5, 515, 205, 8, 8, 6, 8.0,
        ("food_grade", "medical", "marine", "decorative"), "fiber", "medium", "nitrogen", "medium",
        ("Excellent corrosion resistance", "Food safe", "Hygienic", "Good formability"),
        ("Higher cost", "Work hardening", "Lower thermal conductivity"),
    ),
    "stainless_steel_316": SelectionMaterial(
        "Stainless Steel 316", 12.0, 515, 205, 9, 8, 6, 8.0,
        ("marine", "medical", "food_grade"), "fiber", "medium", "nitrogen", "medium",
        ("Superior corrosion resistance", "Marine grade", "Biocompatible", "Chemical resistant"),
        ("High cost", "Work hardening", "Specialized welding required"),
    ),
    "aluminum_6061": SelectionMaterial(
        "Aluminum 6061", 4.2, 310, 276, 7, 7, 9, 2.7,
        ("aerospace", "automotive", "structural"), "fiber", "fast", "nitrogen", "easy",
        ("Lightweight", "Good strength-to-weight", "Corrosion resistant", "Easy to machine"),
        ("Lower strength than steel", "Requires special welding", "Thermal expansion"),
    ),
    "aluminum_7075": SelectionMaterial(
        "Aluminum 7075", 8.8, 572, 503, 6, 4, 7, 2.81,
        ("aerospace", "automotive"), "fiber", "medium", "nitrogen", "medium",
        ("Very high strength", "Lightweight", "Aerospace grade", "Good fatigue resistance"),
        ("Expensive", "Difficult to weld", "Stress corrosion susceptible"),
    ),
    "titanium_grade2": SelectionMaterial(
        "Titanium Grade 2", 35.0, 345, 275, 10, 6, 4, 4.5,
        ("aerospace", "medical", "marine"), "fiber", "slow", "argon", "hard",
        ("Excellent corrosion resistance", "Biocompatible", "High strength-to-weight",
         "Temperature resistant"),
        ("Very expensive", "Difficult to machine", "Specialized welding", "Reactive at high temps"),
    ),
    "copper_c101": SelectionMaterial(
        "Copper C101", 9.5, 220, 70, 8, 6, 3, 8.96,
        ("decorative", "marine"), "fiber", "slow", "nitrogen", "hard",
        ("Excellent conductivity", "Antimicrobial", "Corrosion resistant", "Attractive appearance"),
        ("Expensive", "Soft material", "Difficult to cut", "High thermal conductivity"),
    ),
    "brass_c360": SelectionMaterial(
        "Brass C360", 7.2, 470, 310, 7, 5, 9, 8.5,
        ("decorative", "marine"), "fiber", "medium", "nitrogen", "medium",
        ("Excellent machinability", "Attractive appearance", "Good corrosion resistance",
         "Easy to form"),
        ("Contains lead", "Moderate cost", "Dezincification risk", "Limited strength"),
    ),
})

APPLICATION_REQUIREMENTS = _frozen({
    "structural": ApplicationRequirement(300, 3, 15, ("strength", "cost", "weldability")),
    "decorative": ApplicationRequirement(200, 6, 25, ("appearance", "corrosion_resistance", "formability")),
    "automotive": ApplicationRequirement(250, 5, 12, ("strength", "weight", "cost")),
    "aerospace": ApplicationRequirement(
        400, 7, 50, ("strength_to_weight", "fatigue_resistance", "temperature_resistance")),
    "marine": ApplicationRequirement(250, 8, 20, ("corrosion_resistance", "strength", "weldability")),
    "food_grade": ApplicationRequirement(200, 8, 15, ("hygiene", "corrosion_resistance", "cleanability")),
    "medical": ApplicationRequirement(
        300, 9, 40, ("biocompatibility", "corrosion_resistance", "sterilizability")),
})

# ============================================================
# Architectural / structural
# ============================================================

ARCHITECTURAL_MATERIALS = _frozen({
    "aluminum_6061": ArchitecturalMaterial(
        "Aluminum 6061-T6", 310, 276, 69000, 2700, 23.6, "Excellent", "Good", "Excellent",
        "Medium", ("Facades", "Window frames", "Structural elements")),
    "aluminum_5052": ArchitecturalMaterial(
        "Aluminum 5052-H32", 228, 193, 70000, 2680, 23.8, "Excellent", "Excellent", "Good",
        "Medium", ("Marine applications", "Decorative panels")),
    "aluminum_3003": ArchitecturalMaterial(
        "Aluminum 3003-H14", 145, 125, 69000, 2730, 23.2, "Very Good", "Excellent", "Excellent",
        "Low-Medium", ("General purpose", "Non-structural panels")),
    "stainless_304": ArchitecturalMaterial(
        "Stainless Steel 304", 515, 205, 200000, 8000, 17.3, "Excellent", "Excellent", "Good",
        "High", ("Decorative elements", "High-end facades")),
    "stainless_316": ArchitecturalMaterial(
        "Stainless Steel 316", 580, 290, 200000, 8000, 16.0, "Outstanding", "Excellent", "Good",
        "Very High", ("Marine environments", "Chemical exposure")),
    "weathering_steel": ArchitecturalMaterial(
        "Weathering Steel (Corten)", 485, 345, 200000, 7850, 12.0, "Self-protecting", "Good",
        "Good", "Medium", ("Exposed structures", "Artistic elements")),
    "galvanized_steel": ArchitecturalMaterial(
        "Galvanized Steel", 400, 275, 200000, 7850, 12.0, "Very Good", "Fair", "Good",
        "Low-Medium", ("Structural elements", "Cost-effective solutions")),
    "carbon_steel": ArchitecturalMaterial(
        "Carbon Steel (Painted)", 400, 250, 200000, 7850, 12.0, "Poor (requires coating)",
        "Excellent", "Excellent", "Low", ("Painted structures", "Interior elements")),
})

ELEMENT_PROFILES = _frozen({
    "facade_panel": ElementProfile(
        0.5, 0.2, "Structural glazing or mechanical fasteners", "600-800mm centers",
        "Design for wind uplift and thermal movement",
        "Weather seal with structural glazing tape",
        "Thermal breaks at all structural connections"),
    "structural_beam": ElementProfile(
        2.0, 2.5, "Welded or bolted connections", "Per structural analysis",
        "Full moment and shear transfer",
        "Fire-rated sealants at penetrations",
        "Thermal isolation where required by energy code"),
    "decorative_screen": ElementProfile(
        0.3, 0.1, "Mechanical fasteners with thermal breaks", "400-600mm centers",
        "Wind load resistance",
        "Minimal sealing, drainage provisions",
        "Thermal breaks recommended for comfort"),
    "window_frame": ElementProfile(
        0.8, 0.3, "Structural anchors and sealants", "300-400mm centers",
        "Structural and weather seal",
        "Primary and secondary weather seals",
        "Thermal breaks required for energy performance"),
    "canopy_structure": ElementProfile(
        1.5, 2.0, "Structural connections to building frame", "Per structural design",
        "Full load transfer including uplift",
        "Weather sealing at all connections",
        "Thermal breaks at building interface"),
    "balustrade": ElementProfile(
        1.0, 1.5, "Code-compliant structural connections", "Maximum 1200mm centers",
        "Life safety load requirements",
        "Drainage and ventilation provisions",
        "Thermal breaks for condensation control"),
    "architectural_feature": ElementProfile(
        0.7, 0.5, "Custom engineered connections", "Per specific design requirements",
        "Aesthetic and structural performance",
        "Custom sealing per design requirements",
        "Thermal breaks per specific requirements"),
})

# Interior elements carry no wind load
EXPOSURE_PROFILES = _frozen({
    "interior": ExposureProfile(0.0, 10),
    "covered": ExposureProfile(0.5, 30),
    "moderate": ExposureProfile(1.5, 50),
    "severe": ExposureProfile(2.5, 70),
    "extreme": ExposureProfile(4.0, 90),
})

# Keyed by (material, exposure). Only surveyed materials are listed.
THERMAL_SUITABILITY = _frozen({
    ("aluminum_6061", "interior"): SuitabilityRating("Excellent"),
    ("aluminum_6061", "covered"): SuitabilityRating("Excellent"),
    ("aluminum_6061", "moderate"): SuitabilityRating("Very Good"),
    ("aluminum_6061", "severe"): SuitabilityRating("Good"),
    ("aluminum_6061", "extreme"): SuitabilityRating("Fair"),
    ("stainless_304", "interior"): SuitabilityRating("Excellent"),
    ("stainless_304", "covered"): SuitabilityRating("Excellent"),
    ("stainless_304", "moderate"): SuitabilityRating("Excellent"),
    ("stainless_304", "severe"): SuitabilityRating("Excellent"),
    ("stainless_304", "extreme"): SuitabilityRating("Very Good"),
    ("weathering_steel", "interior"): SuitabilityRating("Good"),
    ("weathering_steel", "covered"): SuitabilityRating("Very Good"),
    ("weathering_steel", "moderate"): SuitabilityRating("Excellent"),
    ("weathering_steel", "severe"): SuitabilityRating("Excellent"),
    ("weathering_steel", "extreme"): SuitabilityRating("Very Good"),
})

# ============================================================
# Predictive quality
# ============================================================

QUALITY_CHARACTERISTICS = _frozen({
    "steel": QualityCharacteristics(0.85, 1.6, 0.70, 0.30, 0.90, _frozen({
        "power": 0.25, "speed": 0.30, "pressure": 0.15, "focus": 0.20, "beam": 0.10})),
    "stainless_steel": QualityCharacteristics(0.90, 1.2, 0.80, 0.20, 0.85, _frozen({
        "power": 0.20, "speed": 0.25, "pressure": 0.20, "focus": 0.25, "beam": 0.10})),
    "aluminum": QualityCharacteristics(0.75, 2.0, 0.90, 0.40, 0.80, _frozen({
        "power": 0.30, "speed": 0.35, "pressure": 0.10, "focus": 0.15, "beam": 0.10})),
    "copper": QualityCharacteristics(0.70, 2.5, 0.95, 0.50, 0.75, _frozen({
        "power": 0.35, "speed": 0.30, "pressure": 0.15, "focus": 0.15, "beam": 0.05})),
    "titanium": QualityCharacteristics(0.95, 0.8, 0.60, 0.15, 0.95, _frozen({
        "power": 0.20, "speed": 0.20, "pressure": 0.25, "focus": 0.25, "beam": 0.10})),
    "brass": QualityCharacteristics(0.80, 1.8, 0.75, 0.35, 0.85, _frozen({
        "power": 0.25, "speed": 0.30, "pressure": 0.15, "focus": 0.20, "beam": 0.10})),
})


def _chart(speeds: dict, pierce_times: dict) -> CuttingChart:
    powers = (1000, 2000, 3000, 4000, 6000)
    return CuttingChart(
        speeds=_frozen({t: _frozen(dict(zip(powers, row))) for t, row in speeds.items()}),
        pierce_times=_frozen(pierce_times),
    )


# Production cutting charts, one row per thickness at 1/2/3/4/6 kW
CUTTING_CHARTS = _frozen({
    "steel": _chart({
        1: (8000, 12000, 15000, 16000, 18000),
        2: (6000, 9000, 12000, 14000, 16000),
        3: (4500, 7000, 9500, 11000, 13000),
        5: (3000, 5000, 7000, 8500, 10000),
        8: (2000, 3500, 5000, 6000, 7500),
        10: (1500, 2800, 4000, 5000, 6200),
        15: (1000, 1800, 2500, 3200, 4000),
        20: (700, 1200, 1800, 2300, 2800),
        25: (500, 900, 1300, 1700, 2100),
    }, {1: 0.1, 2: 0.2, 3: 0.3, 5: 0.5, 8: 0.8, 10: 1.2, 15: 2.0, 20: 3.0, 25: 4.5}),
    "stainless_steel": _chart({
        1: (6000, 9000, 11000, 12000, 13000),
        2: (4500, 6500, 8500, 9500, 11000),
        3: (3500, 5000, 6500, 7500, 8500),
        5: (2200, 3500, 4500, 5500, 6500),
        8: (1400, 2200, 3000, 3800, 4500),
        10: (1000, 1700, 2300, 2900, 3500),
        15: (600, 1000, 1400, 1800, 2200),
        20: (400, 700, 1000, 1300, 1600),
    }, {1: 0.15, 2: 0.3, 3: 0.45, 5: 0.7, 8: 1.2, 10: 1.8, 15: 3.0, 20: 4.5}),
    "aluminum": _chart({
        1: (10000, 15000, 18000, 20000, 22000),
        2: (8000, 12000, 15000, 17000, 19000),
        3: (6500, 9500, 12000, 14000, 16000),
        5: (4500, 7000, 9000, 11000, 13000),
        8: (3000, 4500, 6000, 7500, 9000),
        10: (2200, 3500, 4500, 5500, 6500),
        15: (1500, 2300, 3000, 3700, 4500),
        20: (1000, 1600, 2100, 2600, 3200),
    }, {1: 0.08, 2: 0.15, 3: 0.25, 5: 0.4, 8: 0.6, 10: 0.9, 15: 1.5, 20: 2.2}),
})


_TABLES = MappingProxyType({
    Category.THERMAL: THERMAL_PROPERTIES,
    Category.CUTTING: CUTTING_PROPERTIES,
    Category.LASER: LASER_SOURCES,
    Category.QUALITY_GRADE: QUALITY_GRADES,
    Category.PRIORITY: PRIORITY_ADJUSTMENTS,
    Category.GAS_COMPATIBILITY: GAS_COMPATIBILITY,
    Category.SELECTION_MATERIAL: SELECTION_MATERIALS,
    Category.APPLICATION: APPLICATION_REQUIREMENTS,
    Category.ARCHITECTURAL_MATERIAL: ARCHITECTURAL_MATERIALS,
    Category.ELEMENT: ELEMENT_PROFILES,
    Category.EXPOSURE: EXPOSURE_PROFILES,
    Category.THERMAL_SUITABILITY: THERMAL_SUITABILITY,
    Category.QUALITY_CHARACTERISTICS: QUALITY_CHARACTERISTICS,
    Category.CUTTING_CHART: CUTTING_CHARTS,
})

# Record returned when a key is missing from its category
DEFAULT_RECORDS = MappingProxyType({
    Category.THERMAL: THERMAL_PROPERTIES["steel"],
    Category.CUTTING: CUTTING_PROPERTIES["steel"],
    Category.LASER: LASER_SOURCES["fiber"],
    Category.QUALITY_GRADE: QUALITY_GRADES["standard"],
    Category.PRIORITY: PRIORITY_ADJUSTMENTS["balanced"],
    Category.GAS_COMPATIBILITY: GAS_COMPATIBILITY["steel"],
    Category.SELECTION_MATERIAL: SELECTION_MATERIALS["carbon_steel"],
    Category.APPLICATION: APPLICATION_REQUIREMENTS["structural"],
    Category.ARCHITECTURAL_MATERIAL: ARCHITECTURAL_MATERIALS["aluminum_6061"],
    Category.ELEMENT: ELEMENT_PROFILES["facade_panel"],
    Category.EXPOSURE: EXPOSURE_PROFILES["moderate"],
    Category.THERMAL_SUITABILITY: SuitabilityRating("Good"),
    Category.QUALITY_CHARACTERISTICS: QUALITY_CHARACTERISTICS["steel"],
    Category.CUTTING_CHART: CUTTING_CHARTS["steel"],
})


class DomainLibrary:
    """
    Read-only access to the material and process tables.

    Calculators receive an instance rather than importing the tables
    directly, so tests can hand in a library with patched tables.
    """

    version = LIBRARY_VERSION

    def __init__(self, tables: Mapping = None, defaults: Mapping = None):
        self._tables = tables if tables is not None else _TABLES
        self._defaults = defaults if defaults is not None else DEFAULT_RECORDS

    def lookup(self, category: Category, key: Hashable) -> LookupResult:
        """
        Returns the record stored under key, or the category default.
        Never raises for an unknown key.
        """
        table = self._tables[category]
        record = table.get(key)
        if record is not None:
            return LookupResult(record, False, key)
        logger.debug("No %s record for %r, using default", category.value, key)
        return LookupResult(self._defaults[category], True, key)

    def get(self, category: Category, key: Hashable):
        """Shorthand for lookup(...).record when the default flag is not needed."""
        return self.lookup(category, key).record

    def keys(self, category: Category) -> list:
        """Keys of a category in table order (used to build enum field specs)."""
        return list(self._tables[category].keys())


LIBRARY = DomainLibrary()
