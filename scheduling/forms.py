from django import forms

from . import models
from .facts import FactPayload, NaturalKey
from .intervals import Interval

TIME_FORMATS = ["%H:%M", "%H:%M:%S"]


class IntervalForm(forms.Form):
    date = forms.DateField()
    start_time = forms.TimeField(input_formats=TIME_FORMATS)
    end_time = forms.TimeField(input_formats=TIME_FORMATS)

    # start < end is checked by the scheduling core so callers get a typed InvalidInterval
    def interval(self):
        data = self.cleaned_data
        return Interval(data["date"], data["start_time"], data["end_time"])


class ReservationForm(IntervalForm):
    consumer = forms.IntegerField(required=False, min_value=1)
    status = forms.ChoiceField(
        required=False,
        choices=[(models.Commitment.PENDING, "Pending"), (models.Commitment.CONFIRMED, "Confirmed")],
    )
    kind = forms.ChoiceField(required=False, choices=models.Commitment.KIND_CHOICES)
    purpose = forms.CharField(required=False, max_length=200)
    notes = forms.CharField(required=False)


class CancelForm(forms.Form):
    reason = forms.CharField(required=False, max_length=500)


class MaintenanceForm(forms.Form):
    reason = forms.CharField(required=False, max_length=500)


class TeacherAssignmentForm(forms.Form):
    teacher_id = forms.CharField(max_length=64)
    subject_id = forms.CharField(required=False, max_length=64)


class FactForm(forms.Form):
    entity = forms.CharField(max_length=100, help_text="Model label, e.g. scheduling.mealenrollment")
    entity_id = forms.IntegerField(min_value=1)
    date = forms.DateField()
    kind = forms.CharField(max_length=32)
    status = forms.CharField(max_length=16)
    note = forms.CharField(required=False)

    def clean_kind(self):
        return self.cleaned_data["kind"].strip().upper()

    def clean_status(self):
        return self.cleaned_data["status"].strip().upper()

    def natural_key(self):
        data = self.cleaned_data
        return NaturalKey(data["entity"].lower(), data["entity_id"], data["date"], data["kind"])

    def payload(self):
        return FactPayload(self.cleaned_data["status"], self.cleaned_data.get("note") or "")
