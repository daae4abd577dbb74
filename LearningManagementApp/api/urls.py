from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenRefreshView

from LearningManagementApp.api.views import (
    ActivityLogViewSet,
    AssignmentViewSet,
    CourseViewSet,
    DashboardView,
    EnrollmentViewSet,
    HelpMessageViewSet,
    LoginView,
    MaterialViewSet,
    MessageViewSet,
    NotificationViewSet,
    PlatformSettingsView,
    QuizViewSet,
    RegistrationView,
    StudentAssignmentViewSet,
    UserViewSet,
)

router = routers.SimpleRouter()
router.register(r"users", UserViewSet, basename="user")
router.register(r"courses", CourseViewSet, basename="course")
router.register(r"student-assignments", StudentAssignmentViewSet, basename="student-assignment")
router.register(r"enrollments", EnrollmentViewSet, basename="enrollment")
router.register(r"notifications", NotificationViewSet, basename="notification")
router.register(r"messages", MessageViewSet, basename="message")
router.register(r"help-messages", HelpMessageViewSet, basename="help-message")
router.register(r"logs", ActivityLogViewSet, basename="log")

courses_router = routers.NestedSimpleRouter(router, r"courses", lookup="course")
courses_router.register(r"assignments", AssignmentViewSet, basename="course-assignments")
courses_router.register(r"quizzes", QuizViewSet, basename="course-quizzes")
courses_router.register(r"materials", MaterialViewSet, basename="course-materials")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", LoginView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/register/", RegistrationView.as_view(), name="auth-register"),
    path("settings/", PlatformSettingsView.as_view(), name="platform-settings"),
    path("me/dashboard/", DashboardView.as_view(), name="dashboard"),
    path("", include(router.urls)),
    path("", include(courses_router.urls)),
]
