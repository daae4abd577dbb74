"""Serializers for accounts, courses, enrollments, assignments, quizzes, grading and messaging."""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from LearningManagementApp.core.choices import UserRole
from LearningManagementApp.courses.models import Course, Enrollment
from LearningManagementApp.domain.services import progress_service, user_service
from LearningManagementApp.learning.models import Assignment, Material, Quiz, QuizSubmission, StudentAssignment
from LearningManagementApp.messaging.models import ActivityLog, HelpMessage, Message, Notification

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "role"]


class RegistrationSerializer(serializers.Serializer):
    """Input for account creation; role checks happen in the user service."""
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, help_text="User password (write-only).")
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.STUDENT)


class UserUpdateSerializer(serializers.Serializer):
    """Admin edit of an account; every field is optional."""
    username = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)


class PasswordResetSerializer(serializers.Serializer):
    new_password = serializers.CharField(write_only=True)


class RoleCountSerializer(serializers.Serializer):
    role = serializers.CharField()
    count = serializers.IntegerField()


class LoginTokenSerializer(TokenObtainPairSerializer):
    """Issue a JWT pair after checking credentials through the user service (records the login)."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token

    def validate(self, attrs):
        user = user_service.authenticate_user(attrs[self.username_field], attrs["password"])
        self.user = user
        refresh = self.get_token(user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}


class CourseReadSerializer(serializers.ModelSerializer):
    """Course details including the (optional) instructor."""
    instructor = UserSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Course
        fields = ["id", "title", "description", "instructor", "approved"]


class CourseWriteSerializer(serializers.Serializer):
    """Serializer for creating/updating a course."""
    title = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    instructor = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None,
        help_text="Id of a user with the Instructor role.",
    )
    approved = serializers.BooleanField(required=False, default=False)


class EnrollmentSerializer(serializers.ModelSerializer):
    """Enrollment with display-time standing; expects ``platform_settings`` in the context."""
    course_title = serializers.CharField(source="course.title", read_only=True)
    standing = serializers.SerializerMethodField()

    class Meta:
        model = Enrollment
        fields = ["id", "course", "course_title", "progress", "enrolled_date", "standing"]

    def get_standing(self, obj: Enrollment) -> str:
        return progress_service.classify_standing(obj.progress, self.context["platform_settings"]).value


class RosterRowSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    username = serializers.CharField()
    progress = serializers.IntegerField()
    standing = serializers.CharField()


class CourseProgressRowSerializer(serializers.Serializer):
    course_id = serializers.IntegerField()
    course_title = serializers.CharField()
    enrollment_count = serializers.IntegerField()
    average_progress = serializers.FloatField()


class AssignmentReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Assignment
        fields = ["id", "course", "title", "description", "deadline"]


class AssignmentWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    deadline = serializers.DateField(required=False, allow_null=True, default=None)


class MaterialSerializer(serializers.ModelSerializer):
    """Course material as listed to managers and enrolled students."""

    class Meta:
        model = Material
        fields = ["id", "course", "title", "content", "upload_date"]
        read_only_fields = ["id", "course", "upload_date"]


class StudentAssignmentSerializer(serializers.ModelSerializer):
    """A student's assignment row with submission, grade and feedback."""
    assignment_title = serializers.CharField(source="assignment.title", read_only=True)
    course = serializers.IntegerField(source="assignment.course_id", read_only=True)
    deadline = serializers.DateField(source="assignment.deadline", read_only=True)
    student = UserSerializer(read_only=True)

    class Meta:
        model = StudentAssignment
        fields = [
            "id", "assignment", "assignment_title", "course", "deadline", "student",
            "submission", "grade", "feedback", "submitted_date",
        ]
        read_only_fields = fields


class SubmitAssignmentSerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True, help_text="Submission text; overwrites any earlier text.")


class GradeWriteSerializer(serializers.Serializer):
    grade = serializers.IntegerField(help_text="Integer 0–100.")
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class QuizReadSerializer(serializers.ModelSerializer):
    """Quiz as shown to students (correct option hidden)."""

    class Meta:
        model = Quiz
        fields = ["id", "course", "title", "question", "options", "total_points"]


class QuizManageSerializer(QuizReadSerializer):
    """Quiz as shown to its instructor or an admin."""

    class Meta(QuizReadSerializer.Meta):
        fields = QuizReadSerializer.Meta.fields + ["correct_option"]


class QuizWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    question = serializers.CharField()
    options = serializers.ListField(child=serializers.CharField(allow_blank=True))
    correct_option = serializers.IntegerField()
    total_points = serializers.IntegerField(required=False, default=100, help_text="Integer 1–100.")


class QuizAnswerSerializer(serializers.Serializer):
    selected_option = serializers.IntegerField(required=False, allow_null=True, help_text="Option number 1–4.")


class QuizSubmissionSerializer(serializers.ModelSerializer):
    quiz_title = serializers.CharField(source="quiz.title", read_only=True)
    student = UserSerializer(read_only=True)

    class Meta:
        model = QuizSubmission
        fields = ["id", "quiz", "quiz_title", "student", "selected_option", "score", "submitted_date"]
        read_only_fields = fields


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "content", "type", "created_at", "is_read"]
        read_only_fields = fields


class ActivityLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True, allow_null=True, default=None)

    class Meta:
        model = ActivityLog
        fields = ["id", "user", "username", "activity", "timestamp"]
        read_only_fields = fields


class MessageReadSerializer(serializers.ModelSerializer):
    sender = UserSerializer(read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender", "receiver", "course", "course_title", "content", "sent_time", "is_read"]
        read_only_fields = fields


class MessageWriteSerializer(serializers.Serializer):
    receiver = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
    content = serializers.CharField(allow_blank=True)


class HelpMessageSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = HelpMessage
        fields = ["id", "user", "message", "created_at", "status"]
        read_only_fields = ["id", "user", "created_at", "status"]


class PlatformSettingsSerializer(serializers.Serializer):
    pass_threshold = serializers.FloatField(required=False)
    notifications_enabled = serializers.BooleanField(required=False)


class DashboardSerializer(serializers.Serializer):
    role = serializers.CharField()
    sections = serializers.ListField(child=serializers.CharField())
    unread_notifications = serializers.IntegerField()
    courses = serializers.ListField(child=serializers.DictField(), required=False)
