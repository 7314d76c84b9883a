"""Rule table for the docker-compose environment block."""

from mumbleup.config import fields as k
from mumbleup.transform.rules import Policy, Rule

DEFAULT_PORT = "64738"

COMPOSE_RULES: tuple[Rule, ...] = (
    # Let the server generate a fresh SuperUser password on first start.
    Rule("MUMBLE_SUPW", Policy.DROP_ALWAYS),
    Rule("MUMBLE_CONFIG_host", Policy.FORCE_SET, value="0.0.0.0"),
    Rule(
        "MUMBLE_CONFIG_registerHostname",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_HOSTNAME,
        gate=k.PUBLIC_LISTING,
    ),
    Rule("MUMBLE_CONFIG_port", Policy.FORCE_SET, field=k.PORT),
    Rule("MUMBLE_CONFIG_welcometext", Policy.SUBSTITUTE_IF_PRESENT, field=k.WELCOME_TEXT),
    Rule("MUMBLE_CONFIG_serverpassword", Policy.FORCE_SET, field=k.SERVER_PASSWORD),
    Rule(
        "MUMBLE_CONFIG_registerName",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_NAME,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
    ),
    Rule(
        "MUMBLE_CONFIG_registerPassword",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_PASSWORD,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
    ),
    Rule(
        "MUMBLE_CONFIG_registerUrl",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_URL,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
    ),
    Rule("MUMBLE_CONFIG_allowping", Policy.FORCE_SET, value="true"),
    Rule("TZ", Policy.SUBSTITUTE_IF_PRESENT, field=k.TIMEZONE),
    Rule(
        "ports/udp",
        Policy.PORT_BIND,
        field=k.PORT,
        suffix="/udp",
        source="MUMBLE_CONFIG_port",
        default=DEFAULT_PORT,
    ),
    Rule(
        "ports/tcp",
        Policy.PORT_BIND,
        field=k.PORT,
        source="MUMBLE_CONFIG_port",
        default=DEFAULT_PORT,
    ),
)
