from rest_framework.routers import SimpleRouter

from . import views

app_name = 'customers'

router = SimpleRouter()
router.register(r'', views.CustomerViewSet, basename='customer')

urlpatterns = router.urls
