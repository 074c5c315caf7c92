# ===========================================================
# feedback/urls.py
# ===========================================================

from django.urls import path

from .views import (
    AdminFeedbackListView,
    AdminStatsView,
    AdminStatusUpdateView,
    FeedbackCreateView,
    FeedbackDetailView,
    MyFeedbackListView,
)

app_name = "feedback"

# ===========================================================
# ROUTES SUMMARY (mounted under /api/)
# ===========================================================
# 1. feedback                      → Submit a ticket (students)
# 2. feedback/my                   → Own tickets, newest first
# 3. feedback/<id>                 → One ticket (owner or admin)
# 4. admin/feedbacks               → All tickets, triage order
# 5. admin/feedback/<id>/status    → Status change + optional response
# 6. admin/stats                   → Counts by status and category
# ===========================================================

urlpatterns = [
    path("feedback", FeedbackCreateView.as_view(), name="create"),
    path("feedback/my", MyFeedbackListView.as_view(), name="my_list"),
    path("feedback/<int:pk>", FeedbackDetailView.as_view(), name="detail"),
    path("admin/feedbacks", AdminFeedbackListView.as_view(), name="admin_list"),
    path("admin/feedback/<int:pk>/status", AdminStatusUpdateView.as_view(), name="admin_status"),
    path("admin/stats", AdminStatsView.as_view(), name="admin_stats"),
]
