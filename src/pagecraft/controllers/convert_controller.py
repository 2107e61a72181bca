from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm.auto import tqdm

from pagecraft.core.managers.config_manager import config_manager
from pagecraft.core.utils.parallel_workers import convert_file_worker
from pagecraft.core.utils.path_utils import PathUtils
from pagecraft.model import EngineSettings

logger = logging.getLogger(__name__)


class ConvertController:
    """
    Orchestrates batch conversion of HTML files into document tree JSON files.
    Utilizes multiprocessing since parsing and the round-trip guard are CPU bound.
    """

    def __init__(self, *, default_workers: Optional[int] = None) -> None:
        configured = config_manager.get_nested("converter.workers")
        self.default_workers = default_workers or configured or (os.cpu_count() or 4)

    @staticmethod
    def _collect_files(source_dir: Path) -> List[Path]:
        """Returns the .html files directly inside `source_dir`, sorted by name."""
        return sorted(
            p for p in source_dir.iterdir()
            if p.is_file() and p.suffix.lower() in (".html", ".htm")
        )

    @staticmethod
    def _write_result(out_dir: Path, source_name: str, payload: Dict[str, Any]) -> Path:
        target = out_dir / f"{Path(source_name).stem}.json"
        with open(target, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        return target

    def convert_directory(
            self,
            *,
            source_dir: Path,
            out_dir: Optional[Path] = None,
            settings: Optional[EngineSettings] = None,
            flat: Optional[bool] = None,
            workers: Optional[int] = None,
            show_progress: bool = True,
    ) -> Dict[str, Any]:
        """
        Converts every HTML file in `source_dir` in parallel and writes one
        JSON file per page into `out_dir` (default: `source_dir`).
        Returns a dictionary containing execution statistics.
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise NotADirectoryError(f"Not a directory: {source_dir}")

        files = self._collect_files(source_dir)
        if not files:
            return self._empty_stats(source_dir)

        out_dir = PathUtils.ensure_dir(Path(out_dir) if out_dir else source_dir)
        settings = settings or EngineSettings.from_config()
        if flat is None:
            flat = bool(config_manager.get_nested("converter.flat", False))
        n_workers = max(1, min(int(workers or self.default_workers), len(files)))
        settings_data = settings.model_dump()

        start = time.perf_counter()
        ok, ko, demoted, degraded = 0, 0, 0, 0

        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            futures = {
                pool.submit(convert_file_worker, str(path), settings_data, flat): path
                for path in files
            }
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Converting pages", unit=" page")

            for fut in iterator:
                path = futures[fut]
                try:
                    result_json = fut.result()
                    if not result_json or not isinstance(result_json, str):
                        ko += 1
                        continue

                    payload = json.loads(result_json)
                    self._write_result(out_dir, payload["source"], payload)
                    ok += 1
                    demoted += int(bool(payload.get("demoted")))
                    degraded += int(bool(payload.get("degraded")))

                except Exception as e:
                    ko += 1
                    logger.error("Failed to convert %s: %s", path, e, exc_info=True)

        dur = time.perf_counter() - start
        logger.info(f"Converted {ok}/{len(files)} page(s) from {source_dir} in {dur:.2f}s")

        return {
            "source_dir": str(source_dir),
            "out_dir": str(out_dir),
            "pages_total": len(files),
            "pages_success": ok,
            "pages_failed": ko,
            "pages_demoted": demoted,
            "pages_degraded": degraded,
            "duration_s": round(dur, 3),
            "pages_per_s": round((len(files) / dur) if dur > 0 else 0.0, 2),
        }

    def _empty_stats(self, source_dir: Path) -> Dict[str, Any]:
        """Returns a default stats dictionary for directories without HTML files."""
        return {
            "source_dir": str(source_dir), "out_dir": None, "pages_total": 0,
            "pages_success": 0, "pages_failed": 0, "pages_demoted": 0,
            "pages_degraded": 0, "duration_s": 0.0, "pages_per_s": 0.0,
        }
