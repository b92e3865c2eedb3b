"""Tests for core data models."""

from datetime import datetime, timedelta, timezone

import pytest  # type: ignore[import-not-found]

from freelance_tracker.core.models import (
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
    TimeEntry,
    to_local_naive,
)


class TestProject:
    """Test Project model."""

    def test_defaults(self) -> None:
        """Test a project is active with a generated id."""
        project = Project(owner_id="u1", name="Website")

        assert project.id
        assert project.status == ProjectStatus.ACTIVE
        assert project.is_active
        assert project.hourly_rate == 0.0

    def test_missing_rate_becomes_zero(self) -> None:
        """Test an unset rate is treated as zero."""
        project = Project(owner_id="u1", name="Website", hourly_rate=None)  # type: ignore[arg-type]

        assert project.hourly_rate == 0.0

    def test_negative_rate_rejected(self) -> None:
        """Test negative hourly rates are invalid."""
        with pytest.raises(ValueError):
            Project(owner_id="u1", name="Website", hourly_rate=-1)

    def test_status_string_coerced(self) -> None:
        """Test status given as string becomes the enum."""
        project = Project(owner_id="u1", name="Website", status="inactive")  # type: ignore[arg-type]

        assert project.status == ProjectStatus.INACTIVE
        assert not project.is_active

    def test_to_dict_and_back(self) -> None:
        """Test CSV serialization keeps every field."""
        project = Project(
            owner_id="u1",
            name="Website",
            hourly_rate=125000.5,
            description="Redesign",
            created_at=datetime(2026, 10, 1, 9, 0),
        )

        data = project.to_dict()
        assert data["hourly_rate"] == "125000.5"
        assert data["status"] == "active"

        restored = Project.from_dict(data)
        assert restored == project


class TestTask:
    """Test Task model."""

    def test_defaults(self) -> None:
        """Test a new task is pending without tags or deadline."""
        task = Task(owner_id="u1", project_id="p1", name="Landing page", estimated_hours=10)

        assert task.status == TaskStatus.PENDING
        assert task.tags == []
        assert task.due_at is None

    @pytest.mark.parametrize("estimate", [0, -2])  # type: ignore[misc]
    def test_estimate_must_be_positive(self, estimate: float) -> None:
        """Test non-positive estimates are rejected."""
        with pytest.raises(ValueError):
            Task(owner_id="u1", project_id="p1", name="x", estimated_hours=estimate)

    def test_in_progress_value(self) -> None:
        """Test the stored value of the in-progress status."""
        assert TaskStatus.IN_PROGRESS.value == "inProgress"
        assert TaskStatus("inProgress") is TaskStatus.IN_PROGRESS

    def test_to_dict_and_back(self) -> None:
        """Test tags and deadline survive serialization."""
        task = Task(
            owner_id="u1",
            project_id="p1",
            name="Landing page",
            estimated_hours=12.5,
            status=TaskStatus.IN_PROGRESS,
            due_at=datetime(2026, 11, 1, 17, 0),
            tags=["design", "frontend"],
        )

        data = task.to_dict()
        assert data["tags"] == '["design", "frontend"]'
        assert data["status"] == "inProgress"

        restored = Task.from_dict(data)
        assert restored == task

    def test_tags_with_commas(self) -> None:
        """Test a tag containing a comma stays one tag."""
        task = Task(
            owner_id="u1",
            project_id="p1",
            name="Invoice",
            estimated_hours=1,
            tags=["client, A", "billing"],
        )

        restored = Task.from_dict(task.to_dict())

        assert restored.tags == ["client, A", "billing"]

    def test_from_dict_empty_optional_fields(self) -> None:
        """Test empty CSV cells load as missing values."""
        data = Task(owner_id="u1", project_id="p1", name="x", estimated_hours=1).to_dict()

        restored = Task.from_dict(data)
        assert restored.due_at is None
        assert restored.tags == []
        assert restored.description is None


class TestTimeEntry:
    """Test TimeEntry model."""

    def test_hours_must_be_positive(self) -> None:
        """Test zero hours are rejected."""
        with pytest.raises(ValueError):
            TimeEntry(
                owner_id="u1",
                project_id="p1",
                task_id="t1",
                hours=0,
                start_time=datetime(2026, 10, 1, 9, 0),
            )

    def test_immutable(self) -> None:
        """Test entries cannot be changed after creation."""
        entry = TimeEntry(
            owner_id="u1",
            project_id="p1",
            task_id="t1",
            hours=1.5,
            start_time=datetime(2026, 10, 1, 9, 0),
        )

        with pytest.raises(AttributeError):
            entry.hours = 2  # type: ignore[misc]

    def test_to_dict_and_back(self) -> None:
        """Test fractional hours keep full precision."""
        entry = TimeEntry(
            owner_id="u1",
            project_id="p1",
            task_id="t1",
            hours=1 / 3,
            start_time=datetime(2026, 10, 1, 9, 0),
        )

        restored = TimeEntry.from_dict(entry.to_dict())
        assert restored == entry
        assert restored.hours == 1 / 3


class TestToLocalNaive:
    """Test timestamp normalization."""

    def test_naive_passes_through(self) -> None:
        """Test naive values are returned unchanged."""
        moment = datetime(2026, 10, 1, 9, 0)

        assert to_local_naive(moment) is moment

    def test_aware_converted(self) -> None:
        """Test aware values become naive local time for the same instant."""
        moment = datetime(2026, 10, 1, 9, 0, tzinfo=timezone(timedelta(hours=7)))

        result = to_local_naive(moment)
        assert result.tzinfo is None
        assert result == moment.astimezone().replace(tzinfo=None)
