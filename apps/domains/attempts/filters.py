import django_filters

from .models import Attempt


class AttemptFilter(django_filters.FilterSet):
    test_id = django_filters.NumberFilter(field_name="exam_id")
    candidate_email = django_filters.CharFilter(field_name="candidate_email", lookup_expr="iexact")
    status = django_filters.ChoiceFilter(choices=Attempt.Status.choices)
    created_from = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_to = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Attempt
        fields = ["test_id", "candidate_email", "status", "created_from", "created_to"]
