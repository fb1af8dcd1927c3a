import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils.translation import gettext_lazy as _
from django.core.validators import RegexValidator


class Role(models.TextChoices):
    """
    Roles a hostel account can hold.
    """
    ADMIN = 'Admin', _('Admin')
    STAFF = 'Staff', _('Staff')
    STUDENT = 'Student', _('Student')


class UserManager(BaseUserManager):
    """
    Custom user manager for email-based authentication.
    """
    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a regular user with an email and password.
        """
        if not email:
            raise ValueError(_('The Email field must be set'))

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return a superuser; superusers sign up as hostel Admins.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('user_metadata', {'role': Role.ADMIN.value})

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Authentication account, identified by email.

    ``user_metadata`` holds the sign-up payload (role, full_name,
    mobile_number, course, joining_date) read by the identity bridge.
    """
    id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        primary_key=True,
    )
    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        _('email address'),
        unique=True,
        help_text=_('Primary email address, used to sign in')
    )

    phone_regex = RegexValidator(
        regex=r'^\+?1?\d{9,15}$',
        message=_("Phone number must be entered in the format: '+999999999'. Up to 15 digits allowed.")
    )
    mobile = models.CharField(
        _('mobile number'),
        validators=[phone_regex],
        max_length=17,
        blank=True,
    )
    user_metadata = models.JSONField(
        _('user metadata'),
        default=dict,
        blank=True,
        help_text=_('Sign-up metadata: role, full_name, mobile_number, course, joining_date')
    )

    # Override AbstractUser fields to make optional
    first_name = models.CharField(_('first name'), max_length=150, blank=True)
    last_name = models.CharField(_('last name'), max_length=150, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-date_joined']

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        """Return the full name of the user."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role(self):
        from apps.core.permissions import get_user_role

        return get_user_role(self)


class Profile(models.Model):
    """
    Public profile of an account; shares its primary key with the user.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='profile',
        db_column='id',
        verbose_name=_('user')
    )
    full_name = models.CharField(_('full name'), max_length=255, blank=True)
    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True
    )
    email = models.EmailField(_('email address'), blank=True)
    mobile_number = models.CharField(_('mobile number'), max_length=20, blank=True)
    course = models.CharField(_('course'), max_length=150, blank=True)
    joining_date = models.DateField(_('joining date'), null=True, blank=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Profile')
        verbose_name_plural = _('Profiles')
        ordering = ['full_name']

    def __str__(self):
        return f"{self.full_name or self.email} ({self.role})"

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @property
    def is_student(self):
        return self.role == Role.STUDENT
