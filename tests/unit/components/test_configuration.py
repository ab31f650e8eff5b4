from pathlib import Path

import pytest

from gctet.components.configuration.configuration import Configuration
from gctet.components.logger.logger import Logger


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "development.yaml").write_text(
        "\n".join(
            [
                "LOG_LEVEL: DEBUG",
                "CONTEXT_WINDOW: 8",
                "LLM_TEMPERATURE: 0.2",
                "IMAGE_KEYWORDS:",
                "  - diagram",
                "  - schematic",
                "TRACE: yes",
            ]
        ),
        encoding="utf-8",
    )
    return tmp_path


@pytest.mark.unit
class TestConfiguration:
    def test_reads_values_from_env_file(self, config_dir: Path, monkeypatch) -> None:
        for key in ("CONTEXT_WINDOW", "LLM_TEMPERATURE", "IMAGE_KEYWORDS", "TRACE"):
            monkeypatch.delenv(key, raising=False)
        configuration = Configuration("development", str(config_dir))

        assert configuration.get_configuration("CONTEXT_WINDOW", int) == 8
        assert configuration.get_configuration("LLM_TEMPERATURE", float) == 0.2
        assert configuration.get_configuration("IMAGE_KEYWORDS", list) == [
            "diagram",
            "schematic",
        ]
        assert configuration.get_configuration("TRACE", bool) is True

    def test_environment_overrides_file(self, config_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("CONTEXT_WINDOW", "4")
        monkeypatch.setenv("IMAGE_KEYWORDS", "wiring plan, layout")
        configuration = Configuration("development", str(config_dir))

        assert configuration.get_configuration("CONTEXT_WINDOW", int) == 4
        assert configuration.get_configuration("IMAGE_KEYWORDS", list) == [
            "wiring plan",
            "layout",
        ]

    def test_json_list_from_environment(self, config_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("IMAGE_KEYWORDS", '["draw", "a, b"]')
        configuration = Configuration("development", str(config_dir))

        assert configuration.get_configuration("IMAGE_KEYWORDS", list) == ["draw", "a, b"]

    def test_default_is_used_when_missing(self, config_dir: Path, monkeypatch) -> None:
        monkeypatch.delenv("GCTET_MISSING_KEY", raising=False)
        configuration = Configuration("development", str(config_dir))

        assert (
            configuration.get_configuration("GCTET_MISSING_KEY", str, default="fallback")
            == "fallback"
        )

    def test_missing_key_without_default_raises(
        self, config_dir: Path, monkeypatch
    ) -> None:
        monkeypatch.delenv("GCTET_MISSING_KEY", raising=False)
        configuration = Configuration("development", str(config_dir))

        with pytest.raises(KeyError):
            configuration.get_configuration("GCTET_MISSING_KEY", str)

    def test_invalid_value_raises(self, config_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("CONTEXT_WINDOW", "ten")
        configuration = Configuration("development", str(config_dir))

        with pytest.raises(ValueError):
            configuration.get_configuration("CONTEXT_WINDOW", int)

    def test_missing_file_is_empty(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configuration = Configuration("staging", str(tmp_path))

        assert configuration.get_configuration("LOG_LEVEL", str, default="INFO") == "INFO"

    def test_non_mapping_file_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "development.yaml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError):
            Configuration("development", str(tmp_path))


@pytest.mark.unit
class TestLogger:
    def test_get_logger_applies_level(self) -> None:
        logger = Logger(log_format="", log_level="warning").get_logger("gctet.test")

        assert logger.name == "gctet.test"
        assert logger.level == 30

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError):
            Logger(log_level="LOUD")
