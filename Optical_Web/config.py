# config.py

import math
import os


class Config:
    """Global viewer configuration.

    Attributes
    ----------
    max_wavelengths:
        Channel capacity ``W`` of every link. Wavelength indices outside
        ``[0, W)`` are clamped when laid out.
    link_boundary_angle:
        Half-angle in radians of the cone framing each link. Boundary lines
        are drawn at ``±link_boundary_angle`` from the link axis.
    service_spread_ratio:
        Fraction of ``link_boundary_angle`` available to the outermost
        wavelength so channel lines stay inside the boundary lines.
    node_inner_radius:
        Radius in world units at which lanes attach to a node rim.
    node_display_radius:
        Radius handed to the renderer for node circles.
    highlight_half_thickness:
        Half width in world units of the quads drawn for highlighted lanes.
    highlight_time_epsilon:
        Offset added to a service's arrival time when jumping to it so the
        creating event is part of the replay.
    lane_color:
        OKLCH ``lightness`` and ``chroma`` used for lanes, keyed by render
        state: ``normal``, ``highlighted`` and ``dimmed``.
    """

    base_dir = os.path.abspath(os.path.dirname(__file__))
    input_dir = os.path.join(base_dir, "input")
    config_file = os.path.join(input_dir, "config.json")
    topology_file = os.path.join(input_dir, "topology.json")

    @staticmethod
    def input_path(*parts: str) -> str:
        """Return absolute path under the ``input`` directory."""
        return os.path.join(Config.input_dir, *parts)

    # Channel plan
    max_wavelengths = 80
    link_boundary_angle = math.pi / 16
    service_spread_ratio = 0.95

    # Node geometry
    node_inner_radius = 20.0
    node_display_radius = 20.2

    #: Vectors shorter than this are treated as degenerate and skipped
    geometry_epsilon = 1.1920929e-07

    highlight_half_thickness = 1.5
    highlight_time_epsilon = 1e-3

    # Colors are sRGB bytes, converted to linear RGBA when laid out
    node_color = [0x00, 0x5D, 0x5D]
    node_highlight_color = [0xFF, 0xB4, 0x00]
    link_boundary_color = [230, 230, 230]

    lane_color = {
        "normal": {"lightness": 0.7289, "chroma": 0.11},
        "highlighted": {"lightness": 0.86, "chroma": 0.16},
        "dimmed": {"lightness": 0.42, "chroma": 0.05},
    }
    #: Hue mapping ``hue = (index + 0.5) / W * hue_span + hue_offset``
    hue_span = 180.0
    hue_offset = 30.0

    log_verbosity = "info"
    log_file: str | None = None

    @classmethod
    def spread_angle(cls) -> float:
        """Return the maximum angular offset of any wavelength lane."""
        return cls.link_boundary_angle * cls.service_spread_ratio

    @classmethod
    def load_from_file(cls, path: str) -> None:
        """Load configuration values from a JSON or YAML file.

        Only keys that already exist as attributes on ``Config`` will be
        assigned. Nested dictionaries are merged recursively when the existing
        attribute is also a ``dict``. A relative ``topology_file`` is resolved
        against the directory containing ``path``.

        Parameters
        ----------
        path:
            Path to the configuration file. ``.yaml`` and ``.yml`` files are
            parsed with PyYAML, anything else as JSON.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        data = _read_mapping(path)
        cls.config_file = os.path.abspath(path)
        base_dir = os.path.dirname(cls.config_file)

        for key, value in data.items():
            if key.startswith("_") or not hasattr(cls, key):
                continue
            if (
                key == "topology_file"
                and isinstance(value, str)
                and not os.path.isabs(value)
            ):
                value = os.path.join(base_dir, value)
            current = getattr(cls, key)
            if callable(current):
                continue
            if isinstance(current, dict) and isinstance(value, dict):
                _merge_into(current, value)
            else:
                setattr(cls, key, value)


def _merge_into(target: dict, source: dict) -> None:
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge_into(target[key], value)
        else:
            target[key] = value


def _read_mapping(path: str) -> dict:
    if path.lower().endswith((".yaml", ".yml")):
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
    else:
        import json

        with open(path) as f:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"configuration file {path} must contain a mapping")
    return data


def load_config(path: str | None = None) -> dict:
    """Load configuration from ``path`` and return the data."""
    if path is None:
        path = Config.input_path("config.json")
    Config.load_from_file(path)
    return _read_mapping(path)
