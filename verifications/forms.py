from django import forms

from .engine import STATUS_ALL
from .models import Credential

STATUS_FILTER_CHOICES = [
    (Credential.Status.PENDING, 'Pending Review'),
    (Credential.Status.VERIFIED, 'Verified'),
    (Credential.Status.REJECTED, 'Rejected'),
    (STATUS_ALL, 'All Statuses'),
]


class QueueFilterForm(forms.Form):
    status = forms.ChoiceField(choices=STATUS_FILTER_CHOICES, required=False)
    q = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs={'placeholder': 'Search business, number or authority'}))
    page = forms.IntegerField(min_value=1, required=False)

    def cleaned_or_defaults(self):
        """
        Filter values for the queue. Invalid input falls back to the first
        page of pending credentials rather than an error page.
        """
        if not self.is_valid():
            return Credential.Status.PENDING, '', 1
        data = self.cleaned_data
        return data.get('status') or Credential.Status.PENDING, data.get('q') or '', data.get('page') or 1


class DecisionForm(forms.Form):
    outcome = forms.ChoiceField(choices=[
        (Credential.Status.VERIFIED, 'Approve'),
        (Credential.Status.REJECTED, 'Reject'),
    ])
