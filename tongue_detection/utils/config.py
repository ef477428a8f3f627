"""
Configuration Management

Handles loading and merging configuration files. Every heuristic threshold
used by the detection pipeline lives here so it can be tuned without touching
algorithm code.

Usage:
    from tongue_detection.utils.config import load_config

    config = load_config('configs/default.yaml')
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Tuple
from dataclasses import dataclass, field


@dataclass
class DetectionConfig:
    """Tongue detection thresholds."""
    # Contour tracing
    edge_threshold: int = 30
    min_contour_points: int = 10

    # Shape filtering (fractions are of the full image)
    min_area_fraction: float = 0.00014  # ~500 px² on a ~3.6 MP photo
    max_area_fraction: float = 0.25
    min_aspect_ratio: float = 0.75
    max_aspect_ratio: float = 8.0
    min_width_fraction: float = 0.01
    min_height_fraction: float = 0.01

    # Confidence scoring
    base_confidence: float = 0.5
    aspect_bonus: float = 0.3
    aspect_bonus_range: Tuple[float, float] = (2.0, 4.0)  # inclusive
    area_bonus: float = 0.2
    area_bonus_range: Tuple[float, float] = (1000, 50000)  # exclusive

    # Candidate resolution
    overlap_threshold: float = 0.3
    candidate_multiplier: float = 1.5
    candidate_margin: int = 5


@dataclass
class FallbackConfig:
    """Synthetic circular arrangement used when detection finds nothing."""
    radius_fraction: float = 0.3
    box_width: float = 40
    box_height: float = 60
    confidence: float = 0.1


@dataclass
class Config:
    """Main configuration container."""
    project_name: str = "slitdrum-tongue-detection"
    version: str = "1.0.0"

    expected_count: int = 15
    log_level: str = "INFO"

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'Config':
        """Create Config from dictionary."""
        config = cls()
        config_dict = config_dict or {}

        project = config_dict.get('project', {})
        config.project_name = project.get('name', config.project_name)
        config.version = project.get('version', config.version)

        config.expected_count = config_dict.get('expected_count', config.expected_count)
        logging_cfg = config_dict.get('logging', {})
        config.log_level = logging_cfg.get('level', config.log_level)

        # Detection config
        detection = config_dict.get('detection', {})
        contours = detection.get('contours', {})
        shape = detection.get('shape', {})
        scoring = detection.get('scoring', {})
        resolver = detection.get('resolver', {})
        defaults = DetectionConfig()
        config.detection = DetectionConfig(
            edge_threshold=contours.get('edge_threshold', defaults.edge_threshold),
            min_contour_points=contours.get('min_points', defaults.min_contour_points),
            min_area_fraction=shape.get('min_area_fraction', defaults.min_area_fraction),
            max_area_fraction=shape.get('max_area_fraction', defaults.max_area_fraction),
            min_aspect_ratio=shape.get('min_aspect_ratio', defaults.min_aspect_ratio),
            max_aspect_ratio=shape.get('max_aspect_ratio', defaults.max_aspect_ratio),
            min_width_fraction=shape.get('min_width_fraction', defaults.min_width_fraction),
            min_height_fraction=shape.get('min_height_fraction', defaults.min_height_fraction),
            base_confidence=scoring.get('base_confidence', defaults.base_confidence),
            aspect_bonus=scoring.get('aspect_bonus', defaults.aspect_bonus),
            aspect_bonus_range=tuple(scoring.get('aspect_bonus_range', defaults.aspect_bonus_range)),
            area_bonus=scoring.get('area_bonus', defaults.area_bonus),
            area_bonus_range=tuple(scoring.get('area_bonus_range', defaults.area_bonus_range)),
            overlap_threshold=resolver.get('overlap_threshold', defaults.overlap_threshold),
            candidate_multiplier=resolver.get('candidate_multiplier', defaults.candidate_multiplier),
            candidate_margin=resolver.get('candidate_margin', defaults.candidate_margin),
        )

        # Fallback config
        fallback = config_dict.get('fallback', {})
        fb_defaults = FallbackConfig()
        config.fallback = FallbackConfig(
            radius_fraction=fallback.get('radius_fraction', fb_defaults.radius_fraction),
            box_width=fallback.get('box_width', fb_defaults.box_width),
            box_height=fallback.get('box_height', fb_defaults.box_height),
            confidence=fallback.get('confidence', fb_defaults.confidence),
        )

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Nested dictionary in the same shape ``from_dict`` reads."""
        det = self.detection
        return {
            'project': {
                'name': self.project_name,
                'version': self.version
            },
            'expected_count': self.expected_count,
            'logging': {
                'level': self.log_level
            },
            'detection': {
                'contours': {
                    'edge_threshold': det.edge_threshold,
                    'min_points': det.min_contour_points
                },
                'shape': {
                    'min_area_fraction': det.min_area_fraction,
                    'max_area_fraction': det.max_area_fraction,
                    'min_aspect_ratio': det.min_aspect_ratio,
                    'max_aspect_ratio': det.max_aspect_ratio,
                    'min_width_fraction': det.min_width_fraction,
                    'min_height_fraction': det.min_height_fraction
                },
                'scoring': {
                    'base_confidence': det.base_confidence,
                    'aspect_bonus': det.aspect_bonus,
                    'aspect_bonus_range': list(det.aspect_bonus_range),
                    'area_bonus': det.area_bonus,
                    'area_bonus_range': list(det.area_bonus_range)
                },
                'resolver': {
                    'overlap_threshold': det.overlap_threshold,
                    'candidate_multiplier': det.candidate_multiplier,
                    'candidate_margin': det.candidate_margin
                }
            },
            'fallback': {
                'radius_fraction': self.fallback.radius_fraction,
                'box_width': self.fallback.box_width,
                'box_height': self.fallback.box_height,
                'confidence': self.fallback.confidence
            }
        }


def load_config(config_path: str) -> Config:
    """
    Load configuration from YAML file.

    The file only needs the keys it changes; everything else keeps the
    values of ``Config()``.

    Args:
        config_path: Path to YAML config file

    Returns:
        Config object
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        user_dict = yaml.safe_load(f) or {}

    return Config.from_dict(merge_configs(Config().to_dict(), user_dict))


def merge_configs(base: Dict, override: Dict) -> Dict:
    """
    Overlay *override* on *base*, section by section.

    Nested sections merge recursively. A key left empty in YAML (``None``)
    keeps the base value. Neither input is modified.

    Args:
        base: Base configuration
        override: Override values

    Returns:
        Merged configuration
    """
    merged = dict(base)

    for key, value in (override or {}).items():
        if value is None and key in merged:
            continue
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def save_config(config: Config, path: str):
    """Save configuration to YAML file."""
    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False)
