import logging
import os
import yaml
import keyring

APP_VERSION = "1.0.0"
KEYRING_SERVICE = "anchor-strength"

logger = logging.getLogger(__name__)


class YamlConfig:
    """Load and save settings to a YAML file, keeping secrets in the keyring.

    Secrets are moved to the system keyring only when ``ENCRYPT_SETTINGS=1``;
    the YAML file then stores ``true`` as a placeholder for them.
    """

    SENSITIVE_KEYS = {
        "api_token",
    }

    def __init__(self, path: str | None = None) -> None:
        self.path = path or os.environ.get("SETTINGS_PATH", "settings.yaml")
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def load(self) -> dict:
        data = self._read()
        if not self.encrypt:
            return data
        for key in self.SENSITIVE_KEYS & set(data):
            secret = keyring.get_password(KEYRING_SERVICE, key)
            if secret is None:
                logger.warning("No keyring entry for %s, dropping it", key)
                data.pop(key)
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(out):
                keyring.set_password(KEYRING_SERVICE, key, str(out[key]))
                out[key] = True
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, sort_keys=True)
