import os
from typing import Optional

import yaml

from getends.domain.run_profile import RunProfile
from getends.exceptions import RunProfileError

_BOOL_KEYS = ("same_domain", "js_only", "no_accept")
_KNOWN_KEYS = {"targets", "target_list", "output", "workers", *_BOOL_KEYS}


class RunProfileLoader:
    """Read a YAML run profile and turn it into a `RunProfile`.

    Responsibility: file IO plus schema validation. Relative `target_list` and
    `output` paths are resolved against the profile's directory.
    """

    def load(self, path: str) -> RunProfile:
        if not os.path.isfile(path):
            raise RunProfileError(path, "not found")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RunProfileError(path, f"could not be read: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise RunProfileError(path, "must be a mapping")
        return self.parse(path, data)

    def parse(self, path: str, data: dict) -> RunProfile:
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise RunProfileError(path, f"has unknown keys: {', '.join(sorted(unknown))}")

        targets = data.get("targets") or []
        if isinstance(targets, str):
            targets = [targets]
        if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
            raise RunProfileError(path, "'targets' must be a string or a list of strings")

        flags = {}
        for key in _BOOL_KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, bool):
                raise RunProfileError(path, f"'{key}' must be true or false")
            flags[key] = value

        workers = data.get("workers")
        if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
            raise RunProfileError(path, "'workers' must be a positive integer")

        base_dir = os.path.dirname(os.path.abspath(path))
        return RunProfile(
            targets=list(targets),
            target_list=self._relative_to(base_dir, data.get("target_list")),
            output=self._relative_to(base_dir, data.get("output")),
            workers=workers,
            source_path=path,
            **flags,
        )

    def _relative_to(self, base_dir: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value)
        return value if os.path.isabs(value) else os.path.join(base_dir, value)
