from catalog.models.activity_log import ActivityLog  # noqa: F401
from catalog.models.course import Course  # noqa: F401
from catalog.models.course_version import CourseVersion  # noqa: F401
