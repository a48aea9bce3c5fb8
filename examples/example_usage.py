"""Ví dụ: dùng service layer trực tiếp (không qua HTTP), với repository in-memory.

Controllers thật chỉ là lớp mỏng gọi các service này.
"""

from datetime import datetime, timedelta

from worksite_tracking.container import build_in_memory_container
from worksite_tracking.core.exceptions import DomainError
from worksite_tracking.geofence.model import GeofenceSpec
from worksite_tracking.projects.model import Project
from worksite_tracking.tasks.model import DailyTarget, TaskAssignment

SITE = (9.908612, 78.090842)


class StepClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now


def main():
    clock = StepClock(datetime(2024, 3, 4, 7, 0))
    container = build_in_memory_container(clock=clock)
    container.projects_repo.add(
        Project(project_id=1, name="Riverside Tower", geofence=GeofenceSpec(SITE[0], SITE[1], 100, 10))
    )
    container.assignments_repo.add(
        TaskAssignment(
            assignment_id=10,
            employee_id=7,
            project_id=1,
            task_id=501,
            work_date=clock.now.date(),
            daily_target=DailyTarget(target_quantity=40, target_unit="m2"),
        )
    )

    attendance = container.attendance_service
    tasks = container.task_service

    try:
        attendance.clock_in(7, 1, latitude=SITE[0] + 0.05, longitude=SITE[1])
    except DomainError as err:
        print("rejected:", err.to_dict())

    print(attendance.clock_in(7, 1, latitude=SITE[0], longitude=SITE[1], accuracy=8).to_dict())
    tasks.start(10, 7)
    clock.now += timedelta(hours=3)
    print(tasks.update_progress(10, 20, employee_id=7).to_dict())

    clock.now += timedelta(hours=6)
    print(attendance.clock_out(7, 1, latitude=SITE[0], longitude=SITE[1]).to_dict())
    print(container.summary_service.daily_summary(7, clock.now.date()).to_dict())


if __name__ == "__main__":
    main()
