from pathlib import Path
from typing import Optional, Union

from .settings import CONFIG_RELPATH, Settings, load_settings


class Project:
    def __init__(
        self,
        base_path: Path,
        settings: Optional[Settings] = None,
        config_relpath: Union[str, Path] = CONFIG_RELPATH,
    ):
        self.base_path: Path = base_path
        self.config_relpath: Path = Path(config_relpath)
        self.settings: Settings = settings or Settings()

    @property
    def config_path(self) -> Path:
        # Do not resolve symlinks; return the composed path as-is
        return self.base_path / self.config_relpath

    @classmethod
    def from_base_path(
        cls,
        base_path: Union[str, Path],
        *,
        config_path: Union[str, Path, None] = None,
    ) -> "Project":
        """
        Build a project rooted at base_path. Settings come from config_path
        when given, otherwise from .fuzzpatch/config.yaml under the root if
        that file exists.
        """
        base = Path(base_path).resolve()
        if not base.is_dir():
            raise ValueError(f"Project root is not a directory: {base}")
        cfg = Path(config_path) if config_path is not None else base / CONFIG_RELPATH
        return cls(base, settings=load_settings(cfg))
