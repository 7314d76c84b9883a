"""Rule table for the murmur INI file."""

from mumbleup.config import fields as k
from mumbleup.transform.rules import Policy, Rule

NATIVE_RULES: tuple[Rule, ...] = (
    Rule("registerName", Policy.FORCE_SET, field=k.SERVER_NAME, quote=True),
    Rule("welcometext", Policy.FORCE_SET, field=k.WELCOME_TEXT, quote=True),
    Rule("serverpassword", Policy.FORCE_SET, field=k.SERVER_PASSWORD, quote=True),
    Rule("port", Policy.FORCE_SET, field=k.PORT),
    Rule("users", Policy.FORCE_SET, field=k.MAX_USERS),
    Rule("bandwidth", Policy.FORCE_SET, field=k.BANDWIDTH),
    Rule("certrequired", Policy.FORCE_SET, field=k.CERT_REQUIRED),
    Rule("obfuscate", Policy.FORCE_SET, field=k.OBFUSCATE),
    Rule("allowRecording", Policy.FORCE_SET, field=k.ALLOW_RECORDING),
    Rule("allowhtml", Policy.FORCE_SET, field=k.ALLOW_HTML),
    Rule(
        "registerUrl",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_URL,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
        quote=True,
    ),
    Rule(
        "registerHostname",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_HOSTNAME,
        gate=k.PUBLIC_LISTING,
        quote=True,
    ),
    Rule(
        "registerLocation",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_LOCATION,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
        quote=True,
    ),
    Rule(
        "registerPassword",
        Policy.CONDITIONAL_GROUP,
        field=k.REGISTER_PASSWORD,
        gate=k.PUBLIC_LISTING,
        keep_empty=True,
        quote=True,
    ),
)
