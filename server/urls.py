"""
Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import path
from django.views.decorators.csrf import csrf_exempt

from server.apps.api.views import AssetGraphQLView

admin.autodiscover()

urlpatterns = [
    # GraphQL endpoint, authenticated with bearer tokens:
    path(
        'graphql/',
        csrf_exempt(AssetGraphQLView.as_view(graphiql=settings.DEBUG)),
        name='graphql',
    ),

    # django-admin:
    path('admin/', admin.site.urls),
]
