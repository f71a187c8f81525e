"""
Artisan API URLs.

Include this in your project's urlpatterns:

    path('api/artisan/', include('artisan.api.urls')),
"""

from rest_framework.routers import DefaultRouter

from .views import InterventionViewSet, InvoiceViewSet, NotificationViewSet

router = DefaultRouter()
router.register("interventions", InterventionViewSet)
router.register("invoices", InvoiceViewSet)
router.register("notifications", NotificationViewSet)

urlpatterns = router.urls
