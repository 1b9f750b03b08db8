from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db.models import Q
from django.utils import timezone

from jobs.constants import COMPANY_SIZES, EXPERIENCE_LEVEL_CHOICES

from .models import Company, Profile

User = get_user_model()

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def _validate_image(upload):
    if upload and upload.name.rsplit(".", 1)[-1].lower() not in IMAGE_EXTENSIONS:
        raise forms.ValidationError("Please upload an image file (png, jpg, gif, webp).")
    return upload


class SignUpForm(forms.Form):
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, min_length=6)
    user_type = forms.ChoiceField(choices=User.UserType.choices, widget=forms.RadioSelect)

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if User.objects.filter(Q(email__iexact=email) | Q(username__iexact=email)).exists():
            raise forms.ValidationError("Email already exist")
        return email


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput)
    user_type = forms.ChoiceField(choices=User.UserType.choices, widget=forms.RadioSelect)


class ProfileForm(forms.ModelForm):
    """Job seeker profile."""

    experience_level = forms.ChoiceField(choices=[("", "---------")] + EXPERIENCE_LEVEL_CHOICES, required=False)
    avatar = forms.FileField(required=False)

    class Meta:
        model = Profile
        fields = ["full_name", "phone", "location", "bio", "experience_level", "linkedin_url"]

    def clean_avatar(self):
        return _validate_image(self.cleaned_data.get("avatar"))


class CompanyProfileForm(forms.ModelForm):
    company_size = forms.ChoiceField(choices=[("", "---------")] + [(s, s) for s in COMPANY_SIZES], required=False)
    logo = forms.FileField(required=False)

    class Meta:
        model = Company
        fields = [
            "company_name",
            "description",
            "industry",
            "headquarters",
            "founding_year",
            "company_size",
            "company_website",
            "linkedin_url",
        ]

    def clean_founding_year(self):
        year = self.cleaned_data.get("founding_year")
        if year and not 1800 <= year <= timezone.localdate().year:
            raise forms.ValidationError("Enter a valid founding year.")
        return year

    def clean_logo(self):
        return _validate_image(self.cleaned_data.get("logo"))


class CompanyApplicationForm(CompanyProfileForm):
    """Company onboarding: the admin's own details plus the company."""

    full_name = forms.CharField(max_length=150)
    phone = forms.CharField(max_length=30, required=False)
    location = forms.CharField(max_length=200, required=False)
    avatar = forms.FileField(required=False)

    def clean_avatar(self):
        return _validate_image(self.cleaned_data.get("avatar"))


class CompanyUserForm(forms.Form):
    full_name = forms.CharField(max_length=150)
    email = forms.EmailField()
    phone = forms.CharField(max_length=30, required=False)
    location = forms.CharField(max_length=200, required=False)
    password = forms.CharField(widget=forms.PasswordInput, min_length=6)
    avatar = forms.FileField(required=False)

    def __init__(self, *args, editing=False, **kwargs):
        super().__init__(*args, **kwargs)
        if editing:
            self.fields["password"].required = False
            self.fields["password"].help_text = "Leave empty to keep the current password."

    def clean_avatar(self):
        return _validate_image(self.cleaned_data.get("avatar"))


class UserProfileForm(forms.ModelForm):
    """A member's own profile, with an optional password change."""

    avatar = forms.FileField(required=False)
    new_password = forms.CharField(widget=forms.PasswordInput, required=False)
    confirm_password = forms.CharField(widget=forms.PasswordInput, required=False)

    class Meta:
        model = Profile
        fields = ["full_name", "phone", "location", "bio", "linkedin_url"]

    def clean_avatar(self):
        return _validate_image(self.cleaned_data.get("avatar"))

    def clean(self):
        cleaned = super().clean()
        new_password = cleaned.get("new_password")
        if new_password:
            if new_password != cleaned.get("confirm_password"):
                self.add_error("confirm_password", "Passwords do not match.")
            else:
                try:
                    validate_password(new_password, self.instance.user if self.instance.pk else None)
                except forms.ValidationError as exc:
                    self.add_error("new_password", exc)
        return cleaned
