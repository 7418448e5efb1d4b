from rest_framework.routers import SimpleRouter

from . import views

app_name = 'classes'

router = SimpleRouter()
router.register(r'templates', views.ClassTemplateViewSet, basename='class-template')
router.register(r'sessions', views.ClassSessionViewSet, basename='class-session')
router.register(r'lookups', views.ClassLookupViewSet, basename='class-lookup')

urlpatterns = router.urls
