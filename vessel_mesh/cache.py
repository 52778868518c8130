"""
Geometry cache and the loader that fronts it.

Entries are keyed by (source, color mode). A hit reuses the stored buffers
and scalar arrays without fetching, parsing or rebuilding. The cache has
no eviction; callers clear or invalidate it explicitly.

With ``use_lod`` enabled the loader returns a coarse line preview at once
and builds the full mesh on a background worker. The refinement cannot be
cancelled; when it finishes the full result is cached and handed to the
``on_refined`` callback, which is expected to swap the displayed mesh.
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import numpy as np

from .coloring.colormaps import ColorMode
from .config import VesselMeshConfig
from .core.buffers import MeshBuffers
from .core.result import ErrorCode, OperationResult
from .core.types import VTKDataset
from .io.loaders import TransportError, fetch_vtk_text
from .io.vtk_parser import parse_vtk_text
from .pipeline import build_preview_mesh, build_vessel_mesh


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key: where the data came from and how it is colored."""
    
    source: str
    mode: ColorMode
    
    @classmethod
    def make(cls, source, mode) -> "CacheKey":
        return cls(source=str(source), mode=ColorMode.coerce(mode))


@dataclass
class CachedGeometry:
    """Full-detail build output kept for reuse."""
    
    buffers: MeshBuffers
    scalars: Dict[str, np.ndarray]
    metadata: Dict[str, Any] = field(default_factory=dict)


class GeometryCache:
    """Unbounded in-memory store of built geometry."""
    
    def __init__(self):
        self._entries: Dict[CacheKey, CachedGeometry] = {}
    
    def get(self, key: CacheKey) -> Optional[CachedGeometry]:
        return self._entries.get(key)
    
    def put(self, key: CacheKey, entry: CachedGeometry) -> None:
        self._entries[key] = entry
    
    def invalidate(self, source=None, mode=None) -> int:
        """
        Remove entries matching ``source`` and/or ``mode``.
        
        With neither given, every entry is removed. Returns the number of
        removed entries.
        """
        source = str(source) if source is not None else None
        mode = ColorMode.coerce(mode) if mode is not None else None
        doomed = [
            key for key in self._entries
            if (source is None or key.source == source)
            and (mode is None or key.mode is mode)
        ]
        for key in doomed:
            del self._entries[key]
        return len(doomed)
    
    def clear(self) -> None:
        self._entries.clear()
    
    def keys(self) -> List[CacheKey]:
        return list(self._entries)
    
    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries
    
    def __len__(self) -> int:
        return len(self._entries)


def _entry_from_result(result: OperationResult) -> CachedGeometry:
    metadata = {
        k: v for k, v in result.metadata.items()
        if k not in ("buffers", "scalars", "dataset", "refinement")
    }
    return CachedGeometry(
        buffers=result.metadata["buffers"],
        scalars=result.metadata["scalars"],
        metadata=metadata,
    )


class VesselMeshLoader:
    """
    Fetch, parse, build and cache vessel meshes.
    
    Parameters
    ----------
    fetcher : callable, optional
        ``fetcher(source) -> str``; raises ``TransportError`` on failure.
        Defaults to ``fetch_vtk_text``.
    cache : GeometryCache, optional
        Shared cache; a private one is created when omitted
    executor : Executor, optional
        Runs background refinements for LoD loads; a single-worker
        thread pool is created on first use when omitted
    verbose : bool
        Print cache and refinement messages
    """
    
    def __init__(
        self,
        fetcher: Optional[Callable[[Any], str]] = None,
        cache: Optional[GeometryCache] = None,
        executor: Optional[Executor] = None,
        verbose: bool = False,
    ):
        self.fetcher = fetcher or fetch_vtk_text
        self.cache = cache if cache is not None else GeometryCache()
        self._executor = executor
        self._owns_executor = executor is None
        self.verbose = verbose
        self.stats = {
            "fetches": 0,
            "parse_calls": 0,
            "builds": 0,
            "cache_hits": 0,
        }
    
    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[VesselMeshLoader] {message}")
    
    @property
    def executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="vessel-mesh-refine",
            )
        return self._executor
    
    def _parse(self, text: str, config: VesselMeshConfig) -> VTKDataset:
        self.stats["parse_calls"] += 1
        return parse_vtk_text(text, registry=config.field_registry())
    
    def _build_full(
        self,
        key: CacheKey,
        dataset: VTKDataset,
        config: VesselMeshConfig,
    ) -> OperationResult:
        self.stats["builds"] += 1
        result = build_vessel_mesh(dataset, config)
        if result.is_success():
            self.cache.put(key, _entry_from_result(result))
            result.metadata["from_cache"] = False
        return result
    
    def _from_cache(self, key: CacheKey, entry: CachedGeometry) -> OperationResult:
        self.stats["cache_hits"] += 1
        self._log(f"Cache hit for {key.source} ({key.mode.value})")
        metadata = dict(entry.metadata)
        metadata.update({
            "buffers": entry.buffers,
            "scalars": entry.scalars,
            "from_cache": True,
        })
        return OperationResult.success(
            f"Loaded {key.source} from cache", metadata=metadata,
        )
    
    def load(
        self,
        source,
        config: Optional[VesselMeshConfig] = None,
        on_refined: Optional[Callable[[OperationResult], None]] = None,
    ) -> OperationResult:
        """
        Load a VTK source into render-ready geometry.
        
        Parameters
        ----------
        source : str or Path
            Source identifier handed to the fetcher
        config : VesselMeshConfig, optional
            Build settings; ``config.mode`` is part of the cache key
        on_refined : callable, optional
            Called with the full-detail result when an LoD refinement
            finishes successfully
        
        Returns
        -------
        OperationResult
            Full-detail result (cache hit or synchronous build), or the
            coarse preview (``PARTIAL_SUCCESS``) with the pending refinement
            future in ``metadata['refinement']``. Transport failures return a
            failed result with ``TRANSPORT_FAILED``, invalid settings with
            ``INVALID_PARAMETER``.
        """
        config = config or VesselMeshConfig()
        try:
            config.validate()
        except ValueError as e:
            result = OperationResult.failure(f"Invalid configuration: {e}")
            result.add_error(str(e), ErrorCode.INVALID_PARAMETER)
            return result
        key = CacheKey.make(source, config.mode)
        
        entry = self.cache.get(key)
        if entry is not None:
            return self._from_cache(key, entry)
        
        try:
            self.stats["fetches"] += 1
            text = self.fetcher(source)
        except TransportError as e:
            result = OperationResult.failure(f"Failed to load {source}")
            result.add_error(str(e), ErrorCode.TRANSPORT_FAILED)
            return result
        
        dataset = self._parse(text, config)
        
        if not config.use_lod:
            return self._build_full(key, dataset, config)
        
        preview = build_preview_mesh(dataset, config)
        if preview.is_failure():
            return preview
        # Usable now, full detail still pending.
        metadata = dict(preview.metadata)
        metadata["from_cache"] = False
        metadata["refinement"] = self.executor.submit(
            self._refine, key, dataset, config, on_refined,
        )
        return OperationResult.partial_success(
            preview.message, warnings=preview.warnings, metadata=metadata,
        )
    
    def _refine(
        self,
        key: CacheKey,
        dataset: VTKDataset,
        config: VesselMeshConfig,
        on_refined: Optional[Callable[[OperationResult], None]],
    ) -> OperationResult:
        result = self._build_full(key, dataset, config)
        if result.is_failure():
            self._log(f"Refinement failed for {key.source}, keeping preview: {result.message}")
            return result
        self._log(f"Refined {key.source} to full detail")
        if on_refined is not None:
            on_refined(result)
        return result
    
    def clear_cache(self) -> None:
        self.cache.clear()
        self._log("Cache cleared")
    
    def invalidate(self, source=None, mode=None) -> int:
        removed = self.cache.invalidate(source=source, mode=mode)
        self._log(f"Invalidated {removed} cache entr{'y' if removed == 1 else 'ies'}")
        return removed
    
    def shutdown(self, wait: bool = True) -> None:
        """Stop the owned refinement worker."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
