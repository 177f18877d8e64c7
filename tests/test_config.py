from __future__ import annotations

from cli.doctor import tts_config_problem
from core.config import GEMINI_BASE_URL, OPENAI_BASE_URL, AppSettings, write_user_env_vars
from core.domain.language import SummaryLanguage


def test_defaults():
    settings = AppSettings(_env_file=None)

    assert settings.ai_api_key is None
    assert settings.max_image_dimension == 1280
    assert settings.jpeg_quality == 80
    assert settings.server_port == 3000
    assert settings.default_language is SummaryLanguage.ENGLISH


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AUSHADH_AI_API_KEY", "secret")
    monkeypatch.setenv("AUSHADH_PROXY_URL", "https://proxy.test")
    monkeypatch.setenv("AUSHADH_DEFAULT_LANGUAGE", "ta")

    settings = AppSettings(_env_file=None)

    assert settings.ai_api_key == "secret"
    assert settings.proxy_url == "https://proxy.test"
    assert settings.default_language is SummaryLanguage.TAMIL


def test_write_user_env_vars_merges(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text('# old\nAUSHADH_AI_MODEL="old-model"\nAUSHADH_PROXY_URL=https://p\n', encoding="utf-8")

    write_user_env_vars({"AUSHADH_AI_MODEL": "new-model", "AUSHADH_AI_API_KEY": "k"}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert lines[1:] == [
        "AUSHADH_AI_API_KEY=k",
        "AUSHADH_AI_MODEL=new-model",
        "AUSHADH_PROXY_URL=https://p",
    ]


def test_env_file_is_read(tmp_path):
    env_path = write_user_env_vars({"AUSHADH_AI_MODEL": "from-file"}, env_path=tmp_path / ".env")
    assert AppSettings(_env_file=env_path).ai_model == "from-file"


def test_language_labels():
    assert SummaryLanguage.default() is SummaryLanguage.ENGLISH
    assert SummaryLanguage.codes() == ["en", "hi", "te", "ta", "kn", "bn", "mr"]
    assert SummaryLanguage.BENGALI.label().startswith("Bengali")


def test_tts_defaults_point_at_the_tts_provider():
    settings = AppSettings(_env_file=None)

    assert settings.ai_base_url == GEMINI_BASE_URL
    assert settings.ai_tts_base_url == OPENAI_BASE_URL
    assert settings.ai_tts_model == "gpt-4o-mini-tts"


def test_tts_config_problem():
    gemini_only = AppSettings(_env_file=None, ai_api_key="gemini-key")
    assert "AUSHADH_AI_TTS_API_KEY" in tts_config_problem(gemini_only)

    with_tts_key = AppSettings(_env_file=None, ai_api_key="gemini-key", ai_tts_api_key="openai-key")
    assert tts_config_problem(with_tts_key) is None

    tts_on_gemini = AppSettings(_env_file=None, ai_api_key="k", ai_tts_base_url=GEMINI_BASE_URL)
    assert "audio/speech" in tts_config_problem(tts_on_gemini)

    all_openai = AppSettings(_env_file=None, ai_api_key="k", ai_base_url=OPENAI_BASE_URL)
    assert tts_config_problem(all_openai) is None
