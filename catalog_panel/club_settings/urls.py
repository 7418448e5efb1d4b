from rest_framework.routers import SimpleRouter

from . import views

app_name = 'club_settings'

router = SimpleRouter()
router.register(r'locations', views.LocationViewSet, basename='location')
router.register(r'membership-plans', views.MembershipPlanViewSet, basename='membership-plan')
router.register(r'status-reasons', views.StatusReasonViewSet, basename='status-reason')

urlpatterns = router.urls
