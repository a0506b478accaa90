"""
Persistence layer for walkthrough runs.

Provides JSON/CSV file-based storage for run configuration, fit summaries
and prediction tables.
"""

import os
import json
import shutil
import hashlib
from datetime import datetime
from pathlib import Path
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional, Any
import numpy as np
from filelock import FileLock

from ..analysis.evaluation import PredictionTable


@dataclass
class RunMetadata:
    """Metadata for a walkthrough run."""
    run_id: str
    created_at: str
    config: Dict[str, Any]
    status: str = 'pending'  # pending, completed, failed
    completed_at: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ModelResult:
    """Stored outcome for one fitted model."""
    model_name: str
    model_config: Dict[str, Any]
    fit_summary: Optional[Dict[str, Any]]
    evaluation: Dict[str, Any]
    network: Optional[Dict[str, Any]] = None  # Serialized weights, when available


@dataclass
class RunSummary:
    """Everything about a completed run except the prediction rows."""
    run_id: str
    dataset: Dict[str, Any]
    split_sizes: List[int]
    models: List[ModelResult] = field(default_factory=list)
    comparison: List[Dict[str, Any]] = field(default_factory=list)
    noise_check: Optional[Dict[str, Any]] = None
    completed_at: Optional[str] = None


def _safe_filename(name: str) -> str:
    """Filesystem-safe version of ``name``; distinct names never collide."""
    safe = ''.join(c if c.isalnum() or c in '-_.' else '_' for c in name)
    if safe != name:
        safe += '_' + hashlib.sha256(name.encode('utf-8')).hexdigest()[:8]
    return safe


def _json_default(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


class RunStore:
    """
    File-based storage for walkthrough runs.

    Storage structure:
        <base>/
        ├── index.json                  # Quick lookup index
        └── runs/
            └── run_<timestamp>_<hash>/
                ├── metadata.json       # Config, status, timestamps
                ├── summary.json        # Fit summaries and error statistics
                └── predictions_<model>.csv
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.runs_dir = self.base_path / 'runs'
        self.index_file = self.base_path / 'index.json'

        self.runs_dir.mkdir(parents=True, exist_ok=True)

        with self._get_lock(self.index_file):
            if not self.index_file.exists():
                self._write_index({'version': '1.0', 'runs': {}})

    def _get_lock(self, file_path: Path) -> FileLock:
        """Get a file lock for atomic operations."""
        return FileLock(str(file_path) + '.lock')

    def _read_index(self) -> Dict:
        """Read the index file (caller should hold lock for read-modify-write)."""
        if self.index_file.exists():
            return json.loads(self.index_file.read_text())
        return {'version': '1.0', 'runs': {}}

    def _write_index(self, index: Dict):
        """Write the index file (caller should hold lock for read-modify-write)."""
        self.index_file.write_text(json.dumps(index, indent=2, default=_json_default))

    def _update_index_entry(self, run_id: str, updates: Dict):
        """Update a single run entry, holding the lock for the read-modify-write."""
        with self._get_lock(self.index_file):
            index = self._read_index()
            if run_id in index['runs']:
                index['runs'][run_id].update(updates)
            else:
                index['runs'][run_id] = updates
            self._write_index(index)

    def generate_run_id(self) -> str:
        """Generate a unique run ID."""
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        random_hash = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
        return f'run_{timestamp}_{random_hash}'

    def get_run_dir(self, run_id: str) -> Path:
        """Get the directory for a run."""
        return self.runs_dir / run_id

    def create_run(self, config: Dict[str, Any]) -> RunMetadata:
        """Register a new pending run and write its metadata."""
        metadata = RunMetadata(
            run_id=self.generate_run_id(),
            created_at=datetime.now().isoformat(),
            config=config,
        )
        self.save_metadata(metadata)
        return metadata

    def save_metadata(self, metadata: RunMetadata):
        """Save run metadata."""
        run_dir = self.get_run_dir(metadata.run_id)
        run_dir.mkdir(parents=True, exist_ok=True)

        metadata_file = run_dir / 'metadata.json'
        metadata_file.write_text(json.dumps(asdict(metadata), indent=2, default=_json_default))

        self._update_index_entry(metadata.run_id, {
            'run_id': metadata.run_id,
            'status': metadata.status,
            'created_at': metadata.created_at,
        })

    def save_predictions(self, run_id: str, table: PredictionTable) -> Path:
        """Write one model's prediction table as CSV."""
        run_dir = self.get_run_dir(run_id)
        run_dir.mkdir(parents=True, exist_ok=True)
        path = run_dir / f"predictions_{_safe_filename(table.model_name or 'model')}.csv"
        table.to_csv(str(path))
        return path

    def save_summary(self, summary: RunSummary):
        """Save the run summary and mark the run completed."""
        run_dir = self.get_run_dir(summary.run_id)
        run_dir.mkdir(parents=True, exist_ok=True)

        if summary.completed_at is None:
            summary.completed_at = datetime.now().isoformat()

        summary_file = run_dir / 'summary.json'
        summary_file.write_text(json.dumps(asdict(summary), indent=2, default=_json_default))

        metadata_file = run_dir / 'metadata.json'
        if metadata_file.exists():
            metadata = json.loads(metadata_file.read_text())
            metadata['status'] = 'completed'
            metadata['completed_at'] = summary.completed_at
            metadata_file.write_text(json.dumps(metadata, indent=2))

        best = summary.comparison[0] if summary.comparison else {}
        self._update_index_entry(summary.run_id, {
            'status': 'completed',
            'completed_at': summary.completed_at,
            'n_models': len(summary.models),
            'best_model': best.get('model'),
            'best_rmse': best.get('rmse'),
        })

    def update_status(self, run_id: str, status: str, error: Optional[str] = None):
        """Update run status."""
        metadata_file = self.get_run_dir(run_id) / 'metadata.json'

        if metadata_file.exists():
            metadata = json.loads(metadata_file.read_text())
            metadata['status'] = status
            if error:
                metadata['error'] = error
            if status in ('completed', 'failed'):
                metadata['completed_at'] = datetime.now().isoformat()
            metadata_file.write_text(json.dumps(metadata, indent=2))

        self._update_index_entry(run_id, {'status': status})

    def load_metadata(self, run_id: str) -> Optional[RunMetadata]:
        """Load run metadata."""
        metadata_file = self.get_run_dir(run_id) / 'metadata.json'
        if not metadata_file.exists():
            return None
        return RunMetadata(**json.loads(metadata_file.read_text()))

    def load_summary(self, run_id: str) -> Optional[RunSummary]:
        """Load a run summary."""
        summary_file = self.get_run_dir(run_id) / 'summary.json'
        if not summary_file.exists():
            return None

        data = json.loads(summary_file.read_text())
        data['models'] = [ModelResult(**m) for m in data.get('models', [])]
        return RunSummary(**data)

    def load_predictions(self, run_id: str, model_name: str) -> Optional[PredictionTable]:
        """Load one model's prediction table."""
        path = self.get_run_dir(run_id) / f"predictions_{_safe_filename(model_name)}.csv"
        if not path.exists():
            return None
        return PredictionTable.from_csv(str(path), model_name=model_name)

    def list_runs(self, status: Optional[str] = None, limit: int = 100) -> List[Dict]:
        """List runs (index entries), newest first."""
        index = self._read_index()
        runs = [
            {'run_id': run_id, **info}
            for run_id, info in index['runs'].items()
            if status is None or info.get('status') == status
        ]
        runs.sort(key=lambda r: r.get('created_at', ''), reverse=True)
        return runs[:limit]

    def delete_run(self, run_id: str) -> bool:
        """Delete a run and its files."""
        run_dir = self.get_run_dir(run_id)
        if not run_dir.exists():
            return False

        shutil.rmtree(run_dir)

        with self._get_lock(self.index_file):
            index = self._read_index()
            index['runs'].pop(run_id, None)
            self._write_index(index)

        return True
