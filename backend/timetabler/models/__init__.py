from timetabler.models.college_timing import CollegeTiming  # noqa: F401
from timetabler.models.department import Department  # noqa: F401
from timetabler.models.room import Room, RoomType  # noqa: F401
from timetabler.models.section import Section  # noqa: F401
from timetabler.models.staff import Staff  # noqa: F401
from timetabler.models.staff_subject import StaffSubject  # noqa: F401
from timetabler.models.student import Student  # noqa: F401
from timetabler.models.subject import Subject, SubjectType  # noqa: F401
from timetabler.models.timetable_entry import TimetableEntry  # noqa: F401
