# utils/utils.py

from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger

# =============================================================================
# CORE UTILITY HELPER FUNCTIONS
# =============================================================================

def paginate_queryset(request, queryset, per_page=20):
    """
    Return (page_obj, paginator) for the ?page= value.

    ?page=all returns every row on a single page. Non-numeric pages fall back
    to the first page and pages past the end to the last one.
    """
    page = request.GET.get('page', 1)
    if page == 'all':
        per_page = max(queryset.count(), 1)
        page = 1

    paginator = Paginator(queryset, per_page)
    try:
        page_obj = paginator.page(page)
    except PageNotAnInteger:
        page_obj = paginator.page(1)
    except EmptyPage:
        page_obj = paginator.page(paginator.num_pages)
    return page_obj, paginator


def get_page_metadata(page_obj, paginator):
    """Pagination block for JSON list responses"""
    return {
        'page': page_obj.number,
        'numPages': paginator.num_pages,
        'count': paginator.count,
        'hasNext': page_obj.has_next(),
        'hasPrevious': page_obj.has_previous(),
    }


def parse_filters(request, filter_keys):
    """
    Extract filter values from request.GET.
    filter_keys: list of filter names to extract
    Returns dict: {key: value or None}, blank values become None
    """
    return {
        key: request.GET.get(key, '').strip() or None
        for key in filter_keys
    }
