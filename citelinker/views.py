"""Django views for the citelinker API.

The three endpoints accept JSON bodies, validate them with the forms in
:mod:`citelinker.forms` and delegate to the engine objects built by
:mod:`citelinker.services`. Upstream failures that only affect one phrase
or one signal never surface here; only a failed extraction or a failed
single-phrase search becomes a 500.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .engine.errors import ExtractionError, SearchError
from .forms import CitationReasonForm, KeywordDiscoveryForm, PhraseSearchForm, first_error
from .services import get_pipeline, get_reason_generator, html_to_text

logger = logging.getLogger(__name__)


class InvalidPayload(ValueError):
    """The request body is not a JSON object."""


def _payload(request: HttpRequest) -> Dict[str, Any]:
    if request.content_type == 'application/json' or request.body[:1] in (b'{', b'['):
        try:
            data = json.loads(request.body or b'{}')
        except (UnicodeDecodeError, ValueError) as exc:
            raise InvalidPayload(str(exc)) from exc
        if not isinstance(data, dict):
            raise InvalidPayload('JSON body must be an object')
        return data
    return request.POST.dict()


def _bad_request(message: str, code: str) -> JsonResponse:
    return JsonResponse({'error': message, 'code': code}, status=400)


def _parse(request: HttpRequest, form_class):
    try:
        data = _payload(request)
    except InvalidPayload:
        return None, _bad_request('request body must be a JSON object', 'invalid_json')
    form = form_class(data)
    if not form.is_valid():
        message, code = first_error(form)
        return None, _bad_request(message, code)
    return form, None


@csrf_exempt
@require_POST
def discover_keywords(request: HttpRequest) -> JsonResponse:
    """Extract citation-worthy phrases and rank candidate links for each."""

    form, error = _parse(request, KeywordDiscoveryForm)
    if error is not None:
        return error

    original: str = form.cleaned_data['text']
    text = html_to_text(original) if form.cleaned_data['is_html'] else original
    try:
        selections = get_pipeline().discover(text, form.cleaned_data['terms'])
    except ExtractionError:
        logger.exception('Keyword extraction failed')
        return JsonResponse({'error': 'keyword extraction failed'}, status=500)
    except Exception:
        logger.exception('Keyword discovery failed unexpectedly')
        return JsonResponse({'error': 'keyword extraction failed'}, status=500)

    keywords = [
        {
            'keyword': selection.phrase,
            'options': [link.as_option() for link in selection.options],
        }
        for selection in selections
    ]
    return JsonResponse({'original': original, 'keywords': keywords})


@csrf_exempt
@require_POST
def search_phrase(request: HttpRequest) -> JsonResponse:
    """Return up to three ranked links for a single phrase."""

    form, error = _parse(request, PhraseSearchForm)
    if error is not None:
        return error

    try:
        links = get_pipeline().search_phrase(
            form.cleaned_data['kw'],
            form.cleaned_data['text'],
            form.cleaned_data['terms'],
            strict=True,
        )
    except SearchError:
        logger.exception('Search failed for %r', form.cleaned_data['kw'])
        return JsonResponse({'error': 'search failed'}, status=500)
    except Exception:
        logger.exception('Ranking failed unexpectedly for %r', form.cleaned_data['kw'])
        return JsonResponse({'error': 'search failed'}, status=500)

    return JsonResponse({'links': [{'title': link.title, 'url': link.url} for link in links]})


@csrf_exempt
@require_POST
def citation_reason(request: HttpRequest) -> JsonResponse:
    """Write a short footnote for a chosen link; falls back to generic text."""

    form, error = _parse(request, CitationReasonForm)
    if error is not None:
        return error

    reason = get_reason_generator().explain(
        form.cleaned_data['url'],
        form.cleaned_data['phrase'],
        form.cleaned_data['sentence'] or None,
    )
    return JsonResponse({'reason': reason.text})
