# costing_tool/library/registry.py
"""
Loaded library versions, keyed by library id (e.g. "V1.1", "V2.0").

Built once at process start and only read afterwards. Every lookup by an
unknown id raises CostLibraryNotFound.
"""
from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from costing_tool.config import find_library_file, library_dir, load_document
from costing_tool.estimate.estimator import EstimateOptions, estimate_cost
from costing_tool.estimate.request import CostEstimateRequest
from costing_tool.estimate.response import CostEstimate
from costing_tool.library.model import CostLibrary, CostModule

logger = logging.getLogger(__name__)


class CostLibraryNotFound(LookupError):
    def __init__(self, library_id: str):
        self.library_id = library_id
        super().__init__(f"cost library {library_id!r} not found")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "CostLibraryNotFound", "library_id": self.library_id}


class LibraryRegistry:
    def __init__(self, libraries: Mapping[str, CostLibrary]):
        self._libraries = MappingProxyType(dict(libraries))

    @classmethod
    def from_directory(cls, path: Optional[Path] = None) -> "LibraryRegistry":
        """Load `<path>/<library_id>/cost-library.{json,yaml,yml}` for every sub-directory."""
        root = Path(path) if path is not None else library_dir()
        libraries: Dict[str, CostLibrary] = {}
        if not root.is_dir():
            raise FileNotFoundError(f"{root}: library directory not found")
        for sub in sorted(p for p in root.iterdir() if p.is_dir()):
            f = find_library_file(sub)
            if f is None:
                continue
            libraries[sub.name] = CostLibrary.from_dict(load_document(f), name=sub.name)
            logger.debug("loaded cost library %s from %s", sub.name, f)
        logger.info("loaded %d cost librar%s from %s", len(libraries), "y" if len(libraries) == 1 else "ies", root)
        return cls(libraries)

    def __contains__(self, library_id: object) -> bool:
        return library_id in self._libraries

    def ids(self) -> List[str]:
        return sorted(self._libraries)

    def get(self, library_id: str) -> CostLibrary:
        try:
            return self._libraries[library_id]
        except KeyError:
            raise CostLibraryNotFound(library_id) from None

    def list_modules(self, library_id: str) -> List[CostModule]:
        return list(self.get(library_id).modules)

    def list_currencies(self, library_id: str) -> List[str]:
        return self.get(library_id).currencies()

    def estimate(
        self,
        library_id: str,
        request: CostEstimateRequest,
        options: Optional[EstimateOptions] = None,
    ) -> CostEstimate:
        return estimate_cost(self.get(library_id), request, options)


__all__ = ["CostLibraryNotFound", "LibraryRegistry"]
