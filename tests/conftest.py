import datetime as dt
import sys
from pathlib import Path

import pytest


# Ensure project root is importable for tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from persistence.csv_storage import CsvStorage
from services.pacer.models import Checkpoint, Pinned, RacePlanInput
from services.pacer_service import PlanOrchestrator


@pytest.fixture
def storage(tmp_path: Path) -> CsvStorage:
    return CsvStorage(base_dir=tmp_path)


@pytest.fixture
def orchestrator() -> PlanOrchestrator:
    return PlanOrchestrator()


@pytest.fixture
def race_start() -> dt.datetime:
    return dt.datetime(2026, 6, 12, 6, 0)


@pytest.fixture
def vattern_input(race_start: dt.datetime) -> RacePlanInput:
    """315 km in 10h with one 30 min stop at 150 km."""
    return RacePlanInput(
        total_distance_km=315.0,
        start_datetime=race_start,
        total_duration_seconds=36000,
        checkpoints=(Checkpoint("jkp", "Jönköping", 150.0, stop_duration_seconds=1800),),
    )


@pytest.fixture
def pinned_input(race_start: dt.datetime) -> RacePlanInput:
    """200 km in 8h, no stops, first checkpoint pinned at 08:00."""
    return RacePlanInput(
        total_distance_km=200.0,
        start_datetime=race_start,
        total_duration_seconds=8 * 3600,
        checkpoints=(
            Checkpoint("cp1", "Feed 1", 50.0, arrival=Pinned("08:00")),
            Checkpoint("cp2", "Feed 2", 100.0),
            Checkpoint("cp3", "Feed 3", 150.0, stop_duration_seconds=600),
        ),
    )
