"""Data pipeline: live sources, caching orchestration, synthetic fallbacks and export."""

from sound_treasury.pipeline.dashboard import TAB_COMPARISON, TAB_MODEL, DashboardState
from sound_treasury.pipeline.downsample import downsample
from sound_treasury.pipeline.export import parse_model_csv, to_csv_text, write_model_csv
from sound_treasury.pipeline.orchestrator import MODEL_DOMAIN, SECTOR_DOMAIN, DashboardDataOrchestrator
from sound_treasury.pipeline.sources import DashboardSource, RemoteDataSource
from sound_treasury.pipeline.synthetic import generate_baseline_history, generate_simulated_series

__all__ = [
    # Orchestration
    "DashboardDataOrchestrator",
    "DashboardState",
    "MODEL_DOMAIN",
    "SECTOR_DOMAIN",
    "TAB_MODEL",
    "TAB_COMPARISON",
    # Sources
    "DashboardSource",
    "RemoteDataSource",
    # Series helpers
    "downsample",
    "generate_baseline_history",
    "generate_simulated_series",
    # Export
    "to_csv_text",
    "write_model_csv",
    "parse_model_csv",
]
