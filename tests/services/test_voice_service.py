"""음성 입출력 어댑터 + VoiceOutputService 테스트"""

from pathlib import Path
from unittest.mock import patch

from src.core.catalog.models import NodeCatalog
from src.core.flow.engine import DialogEngine
from src.core.flow.scheduler import ManualScheduler
from src.services.voice import (
    AudioAssetSpeechOutput,
    MockSpeechInput,
    MockSpeechOutput,
    get_speech_input,
    get_speech_output,
)
from src.services.voice_service import VoiceOutputService


class FailingSpeechOutput(MockSpeechOutput):
    def speak(self, text, language, audio_key=None, rate=1.0):
        raise OSError("device busy")


# ── VoiceOutputService ──


class TestSpeakPending:
    def test_each_message_spoken_once(
        self, ja_catalog: NodeCatalog, scheduler: ManualScheduler
    ) -> None:
        output = MockSpeechOutput()
        service = VoiceOutputService(output)
        engine = DialogEngine(ja_catalog, scheduler)

        assert service.speak_pending(engine) == 1
        assert service.speak_pending(engine) == 0
        assert output.spoken == [
            ("下記から取引メニューをお選びください。", "ja", "welcome_3")
        ]

        scheduler.advance(2.0)
        assert service.speak_pending(engine) == 1
        assert output.spoken[-1][2] == "transaction_type_3"

    def test_failure_still_marks_spoken(
        self, ja_catalog: NodeCatalog, scheduler: ManualScheduler
    ) -> None:
        engine = DialogEngine(ja_catalog, scheduler)
        service = VoiceOutputService(FailingSpeechOutput())
        assert service.speak_pending(engine) == 1
        assert engine.unspoken_messages() == []


# ── 어댑터 ──


class TestAudioAssetSpeechOutput:
    def test_resolves_asset(self, tmp_path: Path) -> None:
        (tmp_path / "ja").mkdir()
        asset = tmp_path / "ja" / "welcome_3.mp3"
        asset.write_bytes(b"ID3")
        output = AudioAssetSpeechOutput(tmp_path)

        assert output.is_available() is True
        assert output.speak("ようこそ", "ja", audio_key="welcome_3") is True
        assert output.queue == [asset]

    def test_wav_preferred(self, tmp_path: Path) -> None:
        (tmp_path / "en").mkdir()
        (tmp_path / "en" / "menu.mp3").write_bytes(b"ID3")
        (tmp_path / "en" / "menu.wav").write_bytes(b"RIFF")
        output = AudioAssetSpeechOutput(tmp_path)
        assert output.resolve("menu", "en").suffix == ".wav"

    def test_missing_asset_skipped(self, tmp_path: Path) -> None:
        output = AudioAssetSpeechOutput(tmp_path)
        assert output.speak("hello", "en", audio_key="nothing") is False
        assert output.speak("hello", "en") is False
        assert output.queue == []

    def test_unavailable_without_directory(self, tmp_path: Path) -> None:
        assert AudioAssetSpeechOutput(tmp_path / "missing").is_available() is False


class TestMockAdapters:
    def test_blank_text_not_spoken(self) -> None:
        output = MockSpeechOutput()
        assert output.speak("  ", "ja") is False
        assert output.spoken == []

    def test_mock_input_decodes_utf8(self) -> None:
        assert MockSpeechInput().transcribe(" 預入 ".encode(), "ja") == "預入"


class TestVoiceFactory:
    def test_defaults_to_mock(self) -> None:
        assert isinstance(get_speech_output(), MockSpeechOutput)
        assert isinstance(get_speech_input(), MockSpeechInput)

    def test_audio_asset_with_directory(self, tmp_path: Path) -> None:
        with patch("src.services.voice.factory.settings") as mock_settings:
            mock_settings.AUDIO_ASSET_DIR = str(tmp_path)
            output = get_speech_output("audio_asset")
        assert isinstance(output, AudioAssetSpeechOutput)

    def test_audio_asset_falls_back_without_directory(self, tmp_path: Path) -> None:
        with patch("src.services.voice.factory.settings") as mock_settings:
            mock_settings.AUDIO_ASSET_DIR = str(tmp_path / "missing")
            output = get_speech_output("audio_asset")
        assert isinstance(output, MockSpeechOutput)

    def test_unknown_providers_fall_back(self) -> None:
        assert isinstance(get_speech_output("polly"), MockSpeechOutput)
        assert isinstance(get_speech_input("whisper"), MockSpeechInput)
