import yaml
from typing import Dict, Any

from chip8_tracer.common.errors import ConfigError
from .models import SystemConfig, MemoryConfig, TimingConfig, DisplayConfig, DEFAULT_KEYMAP

# @intent:responsibility YAML形式のシステム構成ファイルを読み込み、SystemConfigに変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        try:
            with open(path, 'r', encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return self.parse(data or {})

    def parse(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping.")

        memory_data = data.get("memory", {}) or {}
        memory = MemoryConfig(
            size=self._parse_int(memory_data.get("size", 0x1000)),
            program_origin=self._parse_int(memory_data.get("program_origin", 0x200)),
            font_base=self._parse_int(memory_data.get("font_base", 0x000)),
            stack_depth=self._parse_int(memory_data.get("stack_depth", 16)),
        )

        timing_data = data.get("timing", {}) or {}
        timing = TimingConfig(
            cpu_hz=self._parse_rate(timing_data.get("cpu_hz", 700), "cpu_hz"),
            timer_hz=self._parse_rate(timing_data.get("timer_hz", 60), "timer_hz"),
        )

        display_data = data.get("display", {}) or {}
        display = DisplayConfig(
            scale=self._parse_int(display_data.get("scale", 10)),
            foreground=str(display_data.get("foreground", "#33FF66")),
            background=str(display_data.get("background", "#101010")),
        )
        if display.scale <= 0:
            raise ConfigError("display.scale must be positive.")

        keymap = dict(DEFAULT_KEYMAP)
        if "keymap" in data:
            keymap = {}
            for name, key in (data.get("keymap") or {}).items():
                value = self._parse_int(key)
                if not 0 <= value <= 0xF:
                    raise ConfigError(f"Key '{name}' maps to {value}, expected 0x0-0xF.")
                keymap[str(name)] = value

        seed = data.get("seed")
        return SystemConfig(
            memory=memory,
            timing=timing,
            display=display,
            keymap=keymap,
            seed=None if seed is None else self._parse_int(seed),
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")

    def _parse_rate(self, value: Any, name: str) -> float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            rate = float(value)
        else:
            rate = float(self._parse_int(value))
        if rate <= 0:
            raise ConfigError(f"{name} must be positive.")
        return rate
