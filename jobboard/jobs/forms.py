import json

from django import forms
from django.conf import settings
from django.utils import timezone

from .constants import (
    COVER_LETTER_MIN_LENGTH,
    EXPERIENCE_LEVEL_CHOICES,
    JOB_DESCRIPTION_MAX_LENGTH,
    JOB_TITLE_MIN_LENGTH,
    RESUME_CONTENT_TYPES,
    RESUME_EXTENSIONS,
)
from .models import ApplicationStatus, Job, JobCategory, JobStatus


class StringListField(forms.Field):
    """Ordered list of strings, posted as a JSON array or one item per line."""

    widget = forms.Textarea(attrs={"rows": 4})

    def __init__(self, *, min_items=0, **kwargs):
        self.min_items = min_items
        kwargs.setdefault("required", min_items > 0)
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in (None, ""):
            return []
        if isinstance(value, (list, tuple)):
            items = value
        else:
            text = str(value).strip()
            if text.startswith("["):
                try:
                    items = json.loads(text)
                except ValueError:
                    raise forms.ValidationError("Invalid data format", code="invalid")
                if not isinstance(items, list):
                    raise forms.ValidationError("Invalid data format", code="invalid")
            else:
                items = text.splitlines()
        return [str(item).strip() for item in items if str(item).strip()]

    def validate(self, value):
        super().validate(value)
        if len(value) < self.min_items:
            raise forms.ValidationError(f"At least {self.min_items} item(s) needed.", code="min_items")

    def prepare_value(self, value):
        if isinstance(value, (list, tuple)):
            return "\n".join(value)
        return value


class JobForm(forms.ModelForm):
    category = forms.ModelChoiceField(queryset=JobCategory.objects.filter(is_active=True), required=False)
    experience_level = forms.ChoiceField(choices=EXPERIENCE_LEVEL_CHOICES)
    application_deadline = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    requirements = StringListField(min_items=1, error_messages={"required": "At least one requirement is needed"})
    benefits = StringListField(min_items=1, error_messages={"required": "At least one benefit is needed"})
    tags = StringListField()

    class Meta:
        model = Job
        fields = [
            "title",
            "category",
            "description",
            "location",
            "is_remote",
            "job_type",
            "experience_level",
            "salary_min",
            "salary_max",
            "salary_currency",
            "application_deadline",
            "requirements",
            "benefits",
            "tags",
        ]

    def clean_title(self):
        title = (self.cleaned_data.get("title") or "").strip()
        if len(title) < JOB_TITLE_MIN_LENGTH:
            raise forms.ValidationError(f"Job title must be at least {JOB_TITLE_MIN_LENGTH} characters")
        return title

    def clean_description(self):
        description = self.cleaned_data.get("description") or ""
        if len(description) > JOB_DESCRIPTION_MAX_LENGTH:
            raise forms.ValidationError(f"Description must be less than {JOB_DESCRIPTION_MAX_LENGTH} characters")
        return description or None

    def clean_application_deadline(self):
        deadline = self.cleaned_data.get("application_deadline")
        if deadline and deadline < timezone.localdate():
            raise forms.ValidationError("Application deadline must be today or in the future")
        return deadline

    def clean(self):
        cleaned = super().clean()
        for name in ("salary_min", "salary_max"):
            value = cleaned.get(name)
            if value is not None and value <= 0:
                self.add_error(name, "Salary must be positive")
        salary_min, salary_max = cleaned.get("salary_min"), cleaned.get("salary_max")
        if salary_min and salary_max and salary_min > salary_max:
            self.add_error("salary_max", "Maximum salary must not be below the minimum salary")
        return cleaned

    def job_fields(self) -> dict:
        """Cleaned values for the mutable job columns."""
        return {name: self.cleaned_data.get(name) for name in self.Meta.fields}


class JobStatusForm(forms.Form):
    status = forms.ChoiceField(choices=JobStatus.choices)


class ApplicationForm(forms.Form):
    cover_letter = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 8}),
        min_length=COVER_LETTER_MIN_LENGTH,
        error_messages={"min_length": f"Cover letter must be at least {COVER_LETTER_MIN_LENGTH} characters long"},
    )
    resume = forms.FileField(error_messages={"required": "Please upload your resume"})

    def clean_resume(self):
        resume = self.cleaned_data["resume"]
        extension = resume.name.rsplit(".", 1)[-1].lower() if "." in resume.name else ""
        content_type = getattr(resume, "content_type", None)
        if extension not in RESUME_EXTENSIONS or (content_type and content_type not in RESUME_CONTENT_TYPES):
            raise forms.ValidationError("Please upload a PDF or Word document")
        max_bytes = getattr(settings, "JOBBOARD_RESUME_MAX_BYTES", 5 * 1024 * 1024)
        if resume.size > max_bytes:
            raise forms.ValidationError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")
        return resume


class ApplicationStatusForm(forms.Form):
    status = forms.ChoiceField(choices=ApplicationStatus.choices)
