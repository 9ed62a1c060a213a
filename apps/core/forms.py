# apps/core/forms.py

from django import forms
from django.core.exceptions import ValidationError

from .models import Board


INPUT_CLASS = 'form-input w-full px-4 py-2 border rounded-lg'


class LoginForm(forms.Form):
    """Login by email or username"""

    identifier = forms.CharField(
        label='Email or username',
        max_length=254,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'you@example.com',
            'autofocus': True
        })
    )

    password = forms.CharField(
        label='Password',
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Your password'
        })
    )

    remember_me = forms.BooleanField(
        label='Remember me',
        required=False,
        widget=forms.CheckboxInput(attrs={
            'class': 'form-checkbox h-4 w-4 text-blue-600'
        })
    )


class SignupForm(forms.Form):
    """Sign-up form - account rules live in auth_service"""

    name = forms.CharField(
        label='Name',
        max_length=150,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Your name'
        })
    )

    email = forms.EmailField(
        label='Email',
        widget=forms.EmailInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'you@example.com'
        })
    )

    password = forms.CharField(
        label='Password',
        min_length=8,
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'At least 8 characters'
        })
    )

    confirm_password = forms.CharField(
        label='Confirm password',
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Type the password again'
        })
    )

    def clean_confirm_password(self):
        """Passwords must match"""
        password = self.cleaned_data.get('password')
        confirm_password = self.cleaned_data.get('confirm_password')

        if password and confirm_password and password != confirm_password:
            raise ValidationError("Passwords do not match")

        return confirm_password


class BoardForm(forms.ModelForm):
    """Create/edit a board"""

    class Meta:
        model = Board
        fields = ['title', 'description']
        widgets = {
            'title': forms.TextInput(attrs={
                'class': INPUT_CLASS,
                'placeholder': 'Board title'
            }),
            'description': forms.Textarea(attrs={
                'class': 'form-textarea w-full px-4 py-2 border rounded-lg',
                'rows': 3,
                'placeholder': 'What is this board about?'
            }),
        }

    def clean_title(self):
        title = (self.cleaned_data.get('title') or '').strip()
        if not title:
            raise ValidationError("Title is required")
        return title


class BoardFilterForm(forms.Form):
    """Dashboard search, filter and sort"""

    FILTER_CHOICES = [
        ('all', 'All boards'),
        ('owned', 'My boards'),
        ('shared', 'Shared with me'),
    ]

    SORT_CHOICES = [
        ('date-newest', 'Newest first'),
        ('date-oldest', 'Oldest first'),
        ('title-asc', 'Title (A-Z)'),
        ('title-desc', 'Title (Z-A)'),
    ]

    q = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={
            'class': 'form-input px-4 py-2 border rounded-lg',
            'placeholder': 'Search boards...'
        })
    )

    filter = forms.ChoiceField(
        choices=FILTER_CHOICES,
        required=False,
        initial='all',
        widget=forms.Select(attrs={
            'class': 'form-select px-4 py-2 border rounded-lg'
        })
    )

    sort = forms.ChoiceField(
        choices=SORT_CHOICES,
        required=False,
        initial='date-newest',
        widget=forms.Select(attrs={
            'class': 'form-select px-4 py-2 border rounded-lg'
        })
    )

    def get_params(self):
        """(q, filter, sort) - an invalid choice falls back to its default"""
        self.is_valid()
        cleaned = getattr(self, 'cleaned_data', {})

        return (
            (cleaned.get('q') or '').strip(),
            cleaned.get('filter') or 'all',
            cleaned.get('sort') or 'date-newest',
        )


class InviteForm(forms.Form):
    email = forms.EmailField(
        label='Email',
        widget=forms.EmailInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'teammate@example.com'
        })
    )
