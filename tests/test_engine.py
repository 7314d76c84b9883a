"""Tests for whole-document rewriting."""

from mumbleup.transform import COMPOSE, COMPOSE_RULES, INI, NATIVE_RULES, rewrite_text

COMPOSE_DOC = """\
services:
  mumble-server:
    image: mumblevoip/mumble-server:latest
    container_name: mumble-server
    ports:
      - "64738:64738"
      - "64738:64738/udp"
    environment:
      - MUMBLE_SUPW=changeme
      - MUMBLE_CONFIG_host=0.0.0.0
      - MUMBLE_CONFIG_port=64738
      - MUMBLE_CONFIG_welcometext=<b>Welcome to Mumble!</b>
      - MUMBLE_CONFIG_serverpassword=
      - MUMBLE_CONFIG_registerName=Mumble Server
      - MUMBLE_CONFIG_registerHostname=
      - MUMBLE_CONFIG_registerPassword=
      - MUMBLE_CONFIG_registerUrl=
      - MUMBLE_CONFIG_allowping=true
      - TZ=UTC
"""

INI_DOC = """\
; Murmur configuration file.
database=/var/lib/mumble-server/mumble-server.sqlite

#welcometext="<br />Welcome to this server running <b>Murmur</b>."
port=64738
#serverpassword=
bandwidth=72000
users=100
;registerName=Mumble Server
;registerPassword=secret
;registerUrl=http://www.mumble.info/
;registerHostname=

[Ice]
Ice.Warn.UnknownProperties=1
"""


class TestComposeDocument:
    """Rewriting a full docker-compose.yml."""

    def test_private_server_rewrite(self, compose_config) -> None:
        """Test the expected output for a private server on a custom port."""
        config = compose_config(port="12345", server_password="s3cret")
        result = rewrite_text(COMPOSE_DOC, COMPOSE_RULES, config, COMPOSE)
        lines = result.splitlines()

        assert '      - "12345:12345"' in lines
        assert '      - "12345:12345/udp"' in lines
        assert "      - MUMBLE_CONFIG_port=12345" in lines
        assert "      - MUMBLE_CONFIG_serverpassword=s3cret" in lines
        assert "      - MUMBLE_CONFIG_welcometext=<b>Welcome to My Server!</b>" in lines
        assert not any("MUMBLE_SUPW" in line for line in lines)
        assert not any("registerHostname" in line for line in lines)
        assert not any("registerName" in line for line in lines)

    def test_public_server_rewrite(self, compose_config) -> None:
        """Test that registration settings are written for public servers."""
        config = compose_config(
            public_listing=True,
            register_hostname="mumble.example.com",
            register_name="Example",
            register_url="https://example.com",
        )
        result = rewrite_text(COMPOSE_DOC, COMPOSE_RULES, config, COMPOSE)
        lines = result.splitlines()

        assert "      - MUMBLE_CONFIG_registerHostname=mumble.example.com" in lines
        assert "      - MUMBLE_CONFIG_registerName=Example" in lines
        assert "      - MUMBLE_CONFIG_registerUrl=https://example.com" in lines
        assert "      - MUMBLE_CONFIG_registerPassword=" in lines

    def test_rewrite_is_idempotent(self, compose_config) -> None:
        """Test that applying the same configuration twice changes nothing more."""
        config = compose_config(port="12345", public_listing=True, register_hostname="h")
        once = rewrite_text(COMPOSE_DOC, COMPOSE_RULES, config, COMPOSE)
        twice = rewrite_text(once, COMPOSE_RULES, config, COMPOSE)
        assert once == twice

    def test_unrelated_lines_unchanged(self, compose_config) -> None:
        """Test that structure outside the environment list is untouched."""
        result = rewrite_text(COMPOSE_DOC, COMPOSE_RULES, compose_config(), COMPOSE)
        assert result.startswith(
            "services:\n"
            "  mumble-server:\n"
            "    image: mumblevoip/mumble-server:latest\n"
            "    container_name: mumble-server\n"
        )

    def test_missing_keys_not_added(self, compose_config) -> None:
        """Test that the compose dialect never appends lines."""
        doc = "services:\n  mumble:\n    environment:\n      - TZ=UTC\n"
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(), COMPOSE)
        assert result == doc

    def test_duplicate_keys_collapse(self, compose_config) -> None:
        """Test that a repeated directive is written only once."""
        doc = (
            "    environment:\n"
            "      - MUMBLE_CONFIG_port=1\n"
            "      - TZ=UTC\n"
            "      - MUMBLE_CONFIG_port=2\n"
        )
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(port="3"), COMPOSE)
        assert result == "    environment:\n      - MUMBLE_CONFIG_port=3\n      - TZ=UTC\n"

    def test_other_service_ports_untouched(self, compose_config) -> None:
        """Test that only the Mumble port mappings are rewritten."""
        doc = (
            "services:\n"
            "  web:\n"
            "    ports:\n"
            '      - "80:80"\n'
            "  mumble-server:\n"
            "    ports:\n"
            '      - "64738:64738"\n'
            '      - "64738:64738/udp"\n'
            "    environment:\n"
            "      - MUMBLE_CONFIG_port=64738\n"
        )
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(port="12345"), COMPOSE)
        lines = result.splitlines()

        assert lines[3] == '      - "80:80"'
        assert lines[6] == '      - "12345:12345"'
        assert lines[7] == '      - "12345:12345/udp"'
        assert lines[9] == "      - MUMBLE_CONFIG_port=12345"

    def test_ports_follow_configured_port(self, compose_config) -> None:
        """Test that mappings of a previously customized port are found."""
        doc = (
            "    ports:\n"
            '      - "64738:64738"\n'
            '      - "5000:5000"\n'
            '      - "5000:5000/udp"\n'
            "    environment:\n"
            "      - MUMBLE_CONFIG_port=5000\n"
        )
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(port="6000"), COMPOSE)
        assert result == (
            "    ports:\n"
            '      - "64738:64738"\n'
            '      - "6000:6000"\n'
            '      - "6000:6000/udp"\n'
            "    environment:\n"
            "      - MUMBLE_CONFIG_port=6000\n"
        )

    def test_port_mappings_not_collapsed(self, compose_config) -> None:
        """Test that two services bound to the Mumble port both keep a mapping."""
        doc = (
            "  a:\n"
            "    ports:\n"
            '      - "64738:64738"\n'
            "  b:\n"
            "    ports:\n"
            '      - "64738:64738"\n'
        )
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(port="7000"), COMPOSE)
        assert result.count('      - "7000:7000"\n') == 2

    def test_mixed_line_endings_preserved(self, compose_config) -> None:
        """Test that each line keeps its own terminator."""
        doc = "environment:\r\n  - MUMBLE_CONFIG_port=1\n  - TZ=UTC\r\n"
        result = rewrite_text(doc, COMPOSE_RULES, compose_config(port="2"), COMPOSE)
        assert result == "environment:\r\n  - MUMBLE_CONFIG_port=2\n  - TZ=UTC\r\n"


class TestIniDocument:
    """Rewriting a murmur INI file."""

    def test_commented_password_uncommented_in_place(self, native_config) -> None:
        """Test that #serverpassword= becomes the active line at the same position."""
        config = native_config(server_password="hunter2")
        before = INI_DOC.splitlines()
        after = rewrite_text(INI_DOC, NATIVE_RULES, config, INI).splitlines()

        index = before.index("#serverpassword=")
        assert after[index] == 'serverpassword="hunter2"'
        assert after.count('serverpassword="hunter2"') == 1

    def test_active_values_replaced(self, native_config) -> None:
        """Test that active settings take the collected values."""
        config = native_config(port="12345", bandwidth="1152000", max_users="25")
        result = rewrite_text(INI_DOC, NATIVE_RULES, config, INI).splitlines()
        assert "port=12345" in result
        assert "bandwidth=1152000" in result
        assert "users=25" in result

    def test_missing_keys_appended_at_end(self, native_config) -> None:
        """Test that settings with no line at all are appended."""
        result = rewrite_text(INI_DOC, NATIVE_RULES, native_config(), INI)
        tail = result.split("Ice.Warn.UnknownProperties=1\n", 1)[1]
        assert "certrequired=false\n" in tail
        assert "obfuscate=false\n" in tail
        assert "allowRecording=true\n" in tail
        assert "allowhtml=true\n" in tail

    def test_private_server_keeps_commented_registration(self, native_config) -> None:
        """Test that gated-off registration defaults stay as comments."""
        result = rewrite_text(INI_DOC, NATIVE_RULES, native_config(), INI)
        assert ";registerPassword=secret\n" in result
        assert ";registerUrl=http://www.mumble.info/\n" in result
        assert ";registerHostname=\n" in result
        assert "\nregisterHostname=" not in result
        assert "\nregisterUrl=" not in result

    def test_public_server_uncomments_registration(self, native_config) -> None:
        """Test that registration defaults are activated for public servers."""
        config = native_config(
            public_listing=True,
            register_url="https://example.com",
            register_hostname="mumble.example.com",
            register_location="DE",
            register_password="reg",
        )
        result = rewrite_text(INI_DOC, NATIVE_RULES, config, INI)
        assert 'registerUrl="https://example.com"\n' in result
        assert 'registerHostname="mumble.example.com"\n' in result
        assert 'registerPassword="reg"\n' in result
        assert result.endswith('registerLocation="DE"\n')

    def test_active_registration_dropped_when_private(self, native_config) -> None:
        """Test that previously active registration lines are removed."""
        doc = 'port=64738\nregisterHostname="old.example.com"\n'
        result = rewrite_text(doc, NATIVE_RULES, native_config(), INI)
        assert "registerHostname" not in result

    def test_active_line_preferred_over_comment(self, native_config) -> None:
        """Test that a comment is left alone when the key is already active."""
        doc = "#port=1\nport=2\n"
        result = rewrite_text(doc, NATIVE_RULES, native_config(port="3"), INI)
        assert result.startswith("#port=1\nport=3\n")

    def test_append_after_unterminated_last_line(self, native_config) -> None:
        """Test that appending terminates the previous last line first."""
        doc = "port=64738"
        result = rewrite_text(doc, NATIVE_RULES, native_config(), INI)
        assert result.startswith("port=64738\nregisterName=")

    def test_append_uses_file_line_ending(self, native_config) -> None:
        """Test that appended lines use the document's terminator."""
        doc = "port=64738\r\n"
        result = rewrite_text(doc, NATIVE_RULES, native_config(), INI)
        assert "\r\nusers=100\r\n" in result
        assert "\n" not in result.replace("\r\n", "")

    def test_rewrite_is_idempotent(self, native_config) -> None:
        """Test that a second pass with the same values changes nothing."""
        config = native_config(server_password="pw", port="5000")
        once = rewrite_text(INI_DOC, NATIVE_RULES, config, INI)
        assert rewrite_text(once, NATIVE_RULES, config, INI) == once
