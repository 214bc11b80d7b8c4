"""View controllers that own filter, loading and gallery state."""

from estatefinder.views.base import RequestTracker, ViewStatus
from estatefinder.views.browse import BrowseView, SearchForm
from estatefinder.views.detail import DetailView

__all__ = ["BrowseView", "DetailView", "RequestTracker", "SearchForm", "ViewStatus"]
