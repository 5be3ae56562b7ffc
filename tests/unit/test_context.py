"""Unit tests for skill_emulator.context."""

from skill_emulator.context import Device, SkillContext


class TestDevice:
    def test_audio_player_supported_by_default(self):
        device = Device()
        assert device.audio_player_supported
        assert not device.display_supported
        assert not device.video_app_supported

    def test_interface_flags(self):
        device = Device()
        device.display_supported = True
        device.video_app_supported = True
        device.audio_player_supported = False
        assert set(device.supported_interfaces) == {"Display", "VideoApp"}

    def test_generate_id_is_stable(self):
        device = Device()
        device_id = device.generate_id()
        assert device_id.startswith("virtualAlexa.deviceID.")
        assert device.generate_id() == device_id


class TestSkillContext:
    def test_generated_identities(self):
        context = SkillContext()
        assert context.locale == "en-US"
        assert context.application_id.startswith("amzn1.echo-sdk-ams.app.")
        assert context.user_id.startswith("amzn1.ask.account.")

    def test_explicit_application_id(self):
        assert SkillContext("de-DE", "my-app").application_id == "my-app"

    def test_session_lifecycle(self):
        context = SkillContext()
        assert context.session is None
        session = context.ensure_session()
        assert session.new
        assert session.id.startswith("SessionID.")
        assert context.ensure_session() is session
        context.end_session()
        assert context.session is None

    def test_system_without_device_id(self):
        system = SkillContext(application_id="app").system()
        assert system["application"] == {"applicationId": "app"}
        assert "deviceId" not in system["device"]
        assert "apiAccessToken" not in system
        assert "permissions" not in system["user"]

    def test_system_with_device_id(self):
        context = SkillContext()
        context.device.generate_id()
        system = context.system()
        assert system["device"]["deviceId"] == context.device.id
        assert system["apiEndpoint"] == "https://api.amazonalexa.com"
        assert system["apiAccessToken"].startswith("virtualAlexa.accessToken.")
        assert "consentToken" in system["user"]["permissions"]

    def test_access_token_is_echoed(self):
        context = SkillContext()
        context.access_token = "linked-account"
        assert context.user()["accessToken"] == "linked-account"

    def test_session_block(self):
        context = SkillContext(application_id="app")
        context.ensure_session().attributes = {"count": 1}
        block = context.session_block(include_attributes=True)
        assert block["new"] is True
        assert block["application"] == {"applicationId": "app"}
        assert block["attributes"] == {"count": 1}
        assert "attributes" not in context.session_block(include_attributes=False)
