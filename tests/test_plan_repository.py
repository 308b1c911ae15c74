import datetime as dt

from persistence.csv_storage import CsvStorage
from persistence.plan_repository import CHECKPOINTS_FILE, PLANS_FILE, PlanRepository
from services.pacer.models import Checkpoint, Pinned, RacePlanInput
from services.pacer_service import PlanOrchestrator


def test_save_and_load_round_trip(storage: CsvStorage, pinned_input: RacePlanInput):
    repo = PlanRepository(storage)
    plan_id = repo.save(pinned_input, "Lake tour")

    loaded = repo.load(plan_id)
    assert loaded == pinned_input
    assert [cp.id for cp in loaded.checkpoints] == ["cp1", "cp2", "cp3"]


def test_loaded_plan_recalculates_identically(
    storage: CsvStorage, orchestrator: PlanOrchestrator, vattern_input: RacePlanInput
):
    repo = PlanRepository(storage)
    plan_id = repo.save(vattern_input, "Vätternrundan")
    loaded = repo.load(plan_id)

    assert loaded.checkpoints[0].name == "Jönköping"
    assert orchestrator.recalculate(loaded) == orchestrator.recalculate(vattern_input)


def test_only_pins_are_persisted(storage: CsvStorage, orchestrator: PlanOrchestrator, pinned_input: RacePlanInput):
    repo = PlanRepository(storage)
    result = orchestrator.recalculate(pinned_input)
    plan_id = repo.save(result.as_input(pinned_input), "From result")

    rows = storage.read_csv(CHECKPOINTS_FILE)
    assert rows["pinnedArrival"].tolist() == ["08:00", "", ""]
    assert rows["pinnedDeparture"].tolist() == ["", "", ""]
    assert orchestrator.recalculate(repo.load(plan_id)) == result


def test_pinned_seconds_kept(storage: CsvStorage, race_start: dt.datetime):
    repo = PlanRepository(storage)
    plan_input = RacePlanInput(
        100.0,
        race_start,
        4 * 3600,
        (Checkpoint("cp", "Feed", 50.0, departure=Pinned(dt.time(8, 10, 15))),),
    )
    loaded = repo.load(repo.save(plan_input, "Seconds"))
    assert loaded.checkpoints[0].departure == Pinned("08:10:15")


def test_update_replaces_checkpoints(storage: CsvStorage, pinned_input: RacePlanInput):
    repo = PlanRepository(storage)
    plan_id = repo.save(pinned_input, "Draft")
    created_at = storage.read_csv(PLANS_FILE).iloc[0]["createdAt"]

    shorter = RacePlanInput(
        pinned_input.total_distance_km,
        pinned_input.start_datetime,
        pinned_input.total_duration_seconds,
        pinned_input.checkpoints[:1],
    )
    assert repo.save(shorter, "Final", plan_id=plan_id) == plan_id

    plans = repo.list()
    assert len(plans) == 1
    assert plans.iloc[0]["label"] == "Final"
    assert storage.read_csv(PLANS_FILE).iloc[0]["createdAt"] == created_at
    assert len(repo.load(plan_id).checkpoints) == 1


def test_plans_are_kept_apart(storage: CsvStorage, pinned_input: RacePlanInput, vattern_input: RacePlanInput):
    repo = PlanRepository(storage)
    first = repo.save(pinned_input, "A")
    second = repo.save(vattern_input, "B")

    assert sorted(repo.list()["label"]) == ["A", "B"]
    assert repo.load(first) == pinned_input
    assert repo.load(second) == vattern_input


def test_delete(storage: CsvStorage, pinned_input: RacePlanInput):
    repo = PlanRepository(storage)
    plan_id = repo.save(pinned_input, "Gone soon")

    assert repo.delete(plan_id) is True
    assert repo.load(plan_id) is None
    assert storage.read_csv(CHECKPOINTS_FILE).empty
    assert repo.delete(plan_id) is False


def test_load_unknown_plan(storage: CsvStorage):
    assert PlanRepository(storage).load("missing") is None
