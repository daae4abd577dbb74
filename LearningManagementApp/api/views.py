"""REST API views: auth, users, courses, course content, grading, enrollments, notifications, messaging, logs, settings."""

from dataclasses import asdict

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from LearningManagementApp.api.mixins import PaginationMixin
from LearningManagementApp.api.serializers import (
    ActivityLogSerializer,
    AssignmentReadSerializer,
    AssignmentWriteSerializer,
    CourseProgressRowSerializer,
    CourseReadSerializer,
    CourseWriteSerializer,
    DashboardSerializer,
    EnrollmentSerializer,
    GradeWriteSerializer,
    HelpMessageSerializer,
    LoginTokenSerializer,
    MaterialSerializer,
    MessageReadSerializer,
    MessageWriteSerializer,
    NotificationSerializer,
    PasswordResetSerializer,
    PlatformSettingsSerializer,
    QuizAnswerSerializer,
    QuizManageSerializer,
    QuizReadSerializer,
    QuizSubmissionSerializer,
    QuizWriteSerializer,
    RegistrationSerializer,
    RoleCountSerializer,
    RosterRowSerializer,
    StudentAssignmentSerializer,
    SubmitAssignmentSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from LearningManagementApp.api.throttles import QuizAnswerRateThrottle, SubmissionRateThrottle
from LearningManagementApp.core.access import Capability, DashboardVisitor, Viewer, can_manage_course
from LearningManagementApp.core.config import load_platform_settings
from LearningManagementApp.core.permissions import (
    CanManageCourses,
    CanManageSettingsOrReadOnly,
    CanManageUsers,
    CanViewLogs,
    CanViewReports,
    IsCourseManager,
    IsRecipient,
)
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.domain.services import (
    course_service,
    grading_service,
    learning_service,
    messaging_service,
    notification_service,
    progress_service,
    settings_service,
    user_service,
)
from LearningManagementApp.learning.models import Assignment, Material, Quiz, StudentAssignment
from LearningManagementApp.messaging.models import ActivityLog, HelpMessage, Message, Notification

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
    404: OpenApiResponse(description="Not Found"),
}

VALIDATION_RESPONSE = {
    400: OpenApiResponse(description="Validation failed; nothing was written."),
}

STORE_RESPONSE = {
    503: OpenApiResponse(description="Data store failure; the action was not applied."),
}

COURSE_PK = OpenApiParameter("course_pk", int, OpenApiParameter.PATH)

User = get_user_model()


# ---------- Auth ----------
@extend_schema(
    tags=["Auth"],
    request=RegistrationSerializer,
    responses={201: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    description="Register a new account. Instructor and Admin accounts require an authenticated admin.",
)
class RegistrationView(APIView):
    """User registration endpoint."""
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        ser = RegistrationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        actor = request.user if request.user and request.user.is_authenticated else None
        user = user_service.register_user(
            ser.validated_data["username"],
            ser.validated_data["password"],
            ser.validated_data["email"],
            ser.validated_data["role"],
            actor=actor,
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Auth"])
class LoginView(TokenObtainPairView):
    """JWT login; every successful login is written to the activity log."""
    serializer_class = LoginTokenSerializer


# ---------- User management ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Users"],
        parameters=[OpenApiParameter("role", str, OpenApiParameter.QUERY, required=False)],
        responses={200: UserSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    retrieve=extend_schema(tags=["Users"], responses={200: UserSerializer, **AUTH_RESPONSES}),
    update=extend_schema(
        tags=["Users"],
        request=UserUpdateSerializer,
        responses={200: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    partial_update=extend_schema(
        tags=["Users"],
        request=UserUpdateSerializer,
        responses={200: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    destroy=extend_schema(
        tags=["Users"],
        description="Delete the account; courses it taught remain without an instructor.",
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    reset_password=extend_schema(
        tags=["Users"],
        request=PasswordResetSerializer,
        responses={204: OpenApiResponse(description="Password changed"), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    by_role=extend_schema(
        tags=["Reports"],
        responses={200: RoleCountSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
)
class UserViewSet(
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Admin user management; accounts are created through ``auth/register/``."""
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, CanManageUsers]

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return UserUpdateSerializer
        return UserSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()
        return user_service.list_users(self.request.user, self.request.query_params.get("role"))

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), UserSerializer)

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop("partial", False)
        user = self.get_object()
        ser = UserUpdateSerializer(data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        user = user_service.update_user(request.user, user, **ser.validated_data)
        return Response(UserSerializer(user).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        user_service.delete_user(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="reset-password")
    def reset_password(self, request: Request, pk: int | None = None) -> Response:
        ser = PasswordResetSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user_service.reset_password(request.user, self.get_object(), ser.validated_data["new_password"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="by-role")
    def by_role(self, request: Request) -> Response:
        """Number of accounts per role."""
        return Response(RoleCountSerializer(user_service.users_by_role(request.user), many=True).data)


# ---------- Courses ----------
@extend_schema_view(
    list=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={201: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    partial_update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    destroy=extend_schema(
        tags=["Courses"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    enroll=extend_schema(
        tags=["Enrollment"],
        request=None,
        responses={201: EnrollmentSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **STORE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    report=extend_schema(
        tags=["Reports"],
        responses={200: RosterRowSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"]}},
    ),
    progress_report=extend_schema(
        tags=["Reports"],
        responses={200: CourseProgressRowSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    submissions=extend_schema(
        tags=["Grading"],
        responses={200: StudentAssignmentSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"]}},
    ),
    quiz_submissions=extend_schema(
        tags=["Grading"],
        responses={200: QuizSubmissionSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"]}},
    ),
)
class CourseViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Course CRUD (admins), enrollment (students), reports and grading queues."""
    serializer_class = CourseReadSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self) -> list:
        if self.action in ("create", "update", "partial_update", "destroy"):
            return [IsAuthenticated(), CanManageCourses()]
        if self.action == "progress_report":
            return [IsAuthenticated(), CanViewReports()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return CourseWriteSerializer
        return CourseReadSerializer

    def get_queryset(self):
        """Courses visible to the requesting user's role."""
        if getattr(self, "swagger_fake_view", False):
            return Course.objects.none()
        return course_service.list_courses_for(Viewer.for_user(self.request.user))

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), CourseReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create a course and return the read representation."""
        ser = CourseWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        course = course_service.create_course(request.user, **ser.validated_data)
        return Response(CourseReadSerializer(course).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop("partial", False)
        course = self.get_object()
        ser = CourseWriteSerializer(data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        course = course_service.update_course(request.user, course, **ser.validated_data)
        return Response(CourseReadSerializer(course).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        course_service.delete_course(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def enroll(self, request: Request, pk: int | None = None) -> Response:
        """Enroll the requesting student in this course."""
        enrollment = course_service.enroll_student(request.user, self.get_object())
        data = EnrollmentSerializer(enrollment, context={"platform_settings": load_platform_settings()}).data
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def report(self, request: Request, pk: int | None = None) -> Response:
        """Per-student progress and standing for the course (instructor or admin)."""
        rows = progress_service.course_roster(request.user, self.get_object(), load_platform_settings())
        return Response(RosterRowSerializer([asdict(r) for r in rows], many=True).data)

    @action(detail=False, methods=["get"], url_path="progress-report")
    def progress_report(self, request: Request) -> Response:
        """Average progress per course (admin reports)."""
        rows = progress_service.course_progress_report(request.user)
        return Response(CourseProgressRowSerializer([asdict(r) for r in rows], many=True).data)

    @action(detail=True, methods=["get"])
    def submissions(self, request: Request, pk: int | None = None) -> Response:
        """Assignment rows with submission text (grading queue)."""
        qs = grading_service.list_assignment_submissions(request.user, self.get_object())
        return self.paginate_and_respond(qs, StudentAssignmentSerializer)

    @action(detail=True, methods=["get"], url_path="quiz-submissions")
    def quiz_submissions(self, request: Request, pk: int | None = None) -> Response:
        qs = grading_service.list_quiz_submissions(request.user, self.get_object())
        return self.paginate_and_respond(qs, QuizSubmissionSerializer)


class CourseChildMixin:
    """Resolve the parent course from the nested ``course_pk`` route."""

    def get_course(self) -> Course:
        course = getattr(self, "_resolved_course", None)
        if course is None:
            course = get_object_or_404(Course.objects.select_related("instructor"), pk=self.kwargs["course_pk"])
            self._resolved_course = course
        return course


# ---------- Assignments ----------
@extend_schema_view(
    list=extend_schema(tags=["Assignments"], responses={200: AssignmentReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Assignments"], responses={200: AssignmentReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Assignments"],
        request=AssignmentWriteSerializer,
        description="Create an assignment; one row per currently enrolled student is created with it.",
        responses={201: AssignmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **STORE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
    destroy=extend_schema(
        tags=["Assignments"],
        description="Delete the assignment; progress of students graded on it is recomputed.",
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
)
@extend_schema(parameters=[COURSE_PK])
class AssignmentViewSet(
    CourseChildMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Assignments of a course."""
    serializer_class = AssignmentReadSerializer
    permission_classes = [IsAuthenticated, IsCourseManager]

    def get_serializer_class(self):
        return AssignmentWriteSerializer if self.action == "create" else AssignmentReadSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Assignment.objects.none()
        return learning_service.list_assignments(self.request.user, self.get_course())

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = AssignmentWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assignment = learning_service.create_assignment(
            request.user,
            self.get_course(),
            ser.validated_data["title"],
            ser.validated_data.get("deadline"),
            description=ser.validated_data.get("description", ""),
        )
        return Response(AssignmentReadSerializer(assignment).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        learning_service.delete_assignment(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Quizzes ----------
@extend_schema_view(
    list=extend_schema(tags=["Quizzes"], responses={200: QuizReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Quizzes"], responses={200: QuizReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Quizzes"],
        request=QuizWriteSerializer,
        responses={201: QuizManageSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
    answer=extend_schema(
        tags=["Quizzes"],
        request=QuizAnswerSerializer,
        description="Answer the quiz. The answer is scored immediately and replaces any earlier answer.",
        responses={
            201: QuizSubmissionSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
            **STORE_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    destroy=extend_schema(
        tags=["Quizzes"],
        description="Delete the quiz with its answers; progress of students who answered is recomputed.",
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
)
@extend_schema(parameters=[COURSE_PK])
class QuizViewSet(
    CourseChildMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Quizzes of a course; the correct option is only shown to course managers."""
    permission_classes = [IsAuthenticated, IsCourseManager]
    throttle_classes: list[type] = []

    def get_throttles(self):
        """Apply rate throttle only on answers."""
        if self.action == "answer":
            self.throttle_classes = [QuizAnswerRateThrottle]
        return super().get_throttles()

    def get_permissions(self) -> list:
        if self.action == "answer":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == "create":
            return QuizWriteSerializer
        if self.action == "answer":
            return QuizAnswerSerializer
        if getattr(self, "swagger_fake_view", False):
            return QuizReadSerializer
        if can_manage_course(Viewer.for_user(self.request.user), self.get_course()):
            return QuizManageSerializer
        return QuizReadSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Quiz.objects.none()
        return learning_service.list_quizzes(self.request.user, self.get_course())

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = QuizWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        quiz = learning_service.create_quiz(request.user, self.get_course(), **ser.validated_data)
        return Response(QuizManageSerializer(quiz).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        learning_service.delete_quiz(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def answer(self, request: Request, pk: int | None = None, *args, **kwargs) -> Response:
        quiz = self.get_object()
        ser = QuizAnswerSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        submission = grading_service.submit_quiz_answer(
            request.user, quiz, ser.validated_data.get("selected_option")
        )
        return Response(QuizSubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)


# ---------- Materials ----------
@extend_schema_view(
    list=extend_schema(tags=["Materials"], responses={200: MaterialSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Materials"], responses={200: MaterialSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Materials"],
        request=MaterialSerializer,
        description="Publish a text material; enrolled students are notified.",
        responses={201: MaterialSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
)
@extend_schema(parameters=[COURSE_PK])
class MaterialViewSet(
    CourseChildMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Course materials: managers publish, enrolled students read."""
    serializer_class = MaterialSerializer
    permission_classes = [IsAuthenticated, IsCourseManager]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Material.objects.none()
        return learning_service.list_materials(self.request.user, self.get_course())

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = MaterialSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        material = learning_service.add_material(
            request.user,
            self.get_course(),
            ser.validated_data["title"],
            ser.validated_data.get("content", ""),
        )
        return Response(MaterialSerializer(material).data, status=status.HTTP_201_CREATED)


# ---------- Student assignments (submission & grading) ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Grading"],
        parameters=[
            OpenApiParameter("course", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("submitted", bool, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: StudentAssignmentSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Grading"], responses={200: StudentAssignmentSerializer, **AUTH_RESPONSES}),
    submit=extend_schema(
        tags=["Submissions"],
        request=SubmitAssignmentSerializer,
        responses={
            200: StudentAssignmentSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    grade=extend_schema(
        tags=["Grading"],
        request=GradeWriteSerializer,
        responses={200: StudentAssignmentSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **STORE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
)
class StudentAssignmentViewSet(
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Per-student assignment rows: students submit, instructors grade."""
    serializer_class = StudentAssignmentSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes: list[type] = []

    def get_throttles(self):
        if self.action == "submit":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def get_queryset(self):
        """Rows visible to the requesting role, optionally filtered by course or submission state."""
        if getattr(self, "swagger_fake_view", False):
            return StudentAssignment.objects.none()
        qs = grading_service.visible_student_assignments(self.request.user)
        course_id = self.request.query_params.get("course")
        if course_id:
            qs = qs.filter(assignment__course_id=course_id)
        submitted = self.request.query_params.get("submitted")
        if submitted is not None:
            qs = qs.submitted() if submitted.lower() in ("1", "true", "yes") else qs.filter(submission__isnull=True)
        return qs

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), StudentAssignmentSerializer)

    @action(detail=True, methods=["post"])
    def submit(self, request: Request, pk: int | None = None) -> Response:
        """Submit (or overwrite) the text of the requesting student's row."""
        row = self.get_object()
        ser = SubmitAssignmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = learning_service.submit_assignment(request.user, row.assignment, ser.validated_data["text"])
        return Response(StudentAssignmentSerializer(updated).data)

    @action(detail=True, methods=["post"])
    def grade(self, request: Request, pk: int | None = None) -> Response:
        """Grade the row (course instructor or admin)."""
        row = self.get_object()
        ser = GradeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = grading_service.grade_assignment(
            request.user, row, ser.validated_data["grade"], ser.validated_data.get("feedback", "")
        )
        return Response(StudentAssignmentSerializer(updated).data)


# ---------- Enrollments ----------
@extend_schema_view(
    list=extend_schema(tags=["Enrollment"], responses={200: EnrollmentSerializer(many=True), **AUTH_RESPONSES}),
)
class EnrollmentViewSet(PaginationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """The requesting student's enrollments with progress and standing."""
    serializer_class = EnrollmentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Enrollment.objects.none()
        return course_service.enrollments_for(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(
            self.get_queryset(), EnrollmentSerializer, context={"platform_settings": load_platform_settings()}
        )


# ---------- Notifications ----------
@extend_schema_view(
    list=extend_schema(tags=["Notifications"], responses={200: NotificationSerializer(many=True), **AUTH_RESPONSES}),
    read=extend_schema(tags=["Notifications"], request=None, responses={200: NotificationSerializer, **AUTH_RESPONSES}),
    clear=extend_schema(
        tags=["Notifications"], request=None,
        responses={204: OpenApiResponse(description="Cleared"), **AUTH_RESPONSES},
    ),
)
class NotificationViewSet(PaginationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """The requesting user's notifications."""
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated, IsRecipient]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Notification.objects.none()
        return notification_service.notifications_for(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), NotificationSerializer)

    @action(detail=True, methods=["post"])
    def read(self, request: Request, pk: int | None = None) -> Response:
        notification = notification_service.mark_read(request.user, self.get_object())
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"])
    def clear(self, request: Request) -> Response:
        notification_service.clear_notifications(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Messages ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Messages"],
        parameters=[OpenApiParameter("box", str, OpenApiParameter.QUERY, required=False, enum=["inbox", "sent"])],
        responses={200: MessageReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    create=extend_schema(
        tags=["Messages"],
        request=MessageWriteSerializer,
        responses={201: MessageReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["instructor", "admin"], "ownership": "course-instructor"}},
    ),
    read=extend_schema(tags=["Messages"], request=None, responses={200: MessageReadSerializer, **AUTH_RESPONSES}),
)
class MessageViewSet(PaginationMixin, mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Inbox (or, with ``?box=sent``, outbox) of the requesting user and message sending."""
    serializer_class = MessageReadSerializer
    permission_classes = [IsAuthenticated, IsRecipient]

    def get_serializer_class(self):
        return MessageWriteSerializer if self.action == "create" else MessageReadSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Message.objects.none()
        if self.action == "list" and self.request.query_params.get("box") == "sent":
            return messaging_service.outbox(self.request.user)
        return messaging_service.inbox(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), MessageReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = MessageWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        message = messaging_service.send_message(
            request.user,
            ser.validated_data["receiver"],
            ser.validated_data["course"],
            ser.validated_data["content"],
        )
        return Response(MessageReadSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def read(self, request: Request, pk: int | None = None) -> Response:
        message = messaging_service.mark_message_read(request.user, self.get_object())
        return Response(MessageReadSerializer(message).data)


# ---------- Help desk ----------
@extend_schema_view(
    list=extend_schema(tags=["Help"], responses={200: HelpMessageSerializer(many=True), **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Help"],
        request=HelpMessageSerializer,
        responses={201: HelpMessageSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    ),
    resolve=extend_schema(
        tags=["Help"], request=None,
        responses={200: HelpMessageSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
)
class HelpMessageViewSet(PaginationMixin, mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Help desk requests: everyone raises, admins resolve."""
    serializer_class = HelpMessageSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return HelpMessage.objects.none()
        return messaging_service.list_help_messages(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), HelpMessageSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = HelpMessageSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        help_message = messaging_service.send_help_message(request.user, ser.validated_data["message"])
        return Response(HelpMessageSerializer(help_message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def resolve(self, request: Request, pk: int | None = None) -> Response:
        help_message = messaging_service.resolve_help_message(request.user, self.get_object())
        return Response(HelpMessageSerializer(help_message).data)


# ---------- Activity log ----------
@extend_schema_view(
    list=extend_schema(tags=["Logs"], responses={200: ActivityLogSerializer(many=True), **AUTH_RESPONSES}),
    clear=extend_schema(
        tags=["Logs"], request=None,
        responses={204: OpenApiResponse(description="Cleared"), **AUTH_RESPONSES},
    ),
)
class ActivityLogViewSet(PaginationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """System activity log (admin only)."""
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAuthenticated, CanViewLogs]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return ActivityLog.objects.none()
        return notification_service.list_logs(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), ActivityLogSerializer)

    @action(detail=False, methods=["post"])
    def clear(self, request: Request) -> Response:
        notification_service.clear_logs(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Platform settings ----------
@extend_schema(tags=["Settings"], request=PlatformSettingsSerializer, responses={200: PlatformSettingsSerializer})
class PlatformSettingsView(APIView):
    """Read (anyone authenticated) or change (admins) the pass threshold and notification switch."""
    permission_classes = [IsAuthenticated, CanManageSettingsOrReadOnly]

    def get(self, request: Request) -> Response:
        return Response(PlatformSettingsSerializer(asdict(load_platform_settings())).data)

    def put(self, request: Request) -> Response:
        ser = PlatformSettingsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = settings_service.update_platform_settings(request.user, **ser.validated_data)
        return Response(PlatformSettingsSerializer(asdict(updated)).data)

    def patch(self, request: Request) -> Response:
        return self.put(request)


# ---------- Dashboard ----------
@extend_schema(tags=["Dashboard"], responses={200: DashboardSerializer, **AUTH_RESPONSES})
class DashboardView(APIView):
    """Sections of the requesting user's dashboard; students also get their course progress."""
    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        viewer = Viewer.for_user(request.user)
        data = {
            "role": viewer.role.name.value,
            "sections": viewer.accept(DashboardVisitor()),
            "unread_notifications": notification_service.unread_count(request.user),
        }
        if viewer.can(Capability.ENROLL):
            overview = progress_service.student_overview(request.user, load_platform_settings())
            data["courses"] = [{**asdict(row), "standing": row.standing.value} for row in overview]
        return Response(DashboardSerializer(data).data)
