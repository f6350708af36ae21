# Authentication module

from lecture_reports.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_current_lecturer,
    get_current_student,
    get_current_reviewer,
    require_roles,
)
