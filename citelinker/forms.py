"""Forms validating the JSON payloads of the citelinker API.

Each form maps to one endpoint. Validation failures are turned into a
400 response carrying a short machine-readable ``code``; the code for a
field is taken from the first error raised for it.
"""

from __future__ import annotations

from django import forms

from .engine.config import iter_terms

MAX_TEXT_LENGTH = 10_000


class TermsField(forms.Field):
    """Optional domain hints given as a list or a comma/newline separated string."""

    def to_python(self, value):  # type: ignore[override]
        if value in self.empty_values:
            return ()
        if not isinstance(value, (str, list, tuple)):
            raise forms.ValidationError('Terms must be a list or a comma separated string.', code='terms_invalid')
        return iter_terms(value)


class KeywordDiscoveryForm(forms.Form):
    """Article text to analyse for citation-worthy phrases."""

    text = forms.CharField(
        strip=False,
        error_messages={'required': 'text required'},
    )
    terms = TermsField(required=False)
    is_html = forms.BooleanField(required=False)

    def clean_text(self) -> str:
        text = self.cleaned_data['text']
        if not text.strip():
            raise forms.ValidationError('text required', code='text_required')
        if len(text) > MAX_TEXT_LENGTH:
            raise forms.ValidationError(
                f'text must be at most {MAX_TEXT_LENGTH} characters',
                code='text_too_long',
            )
        return text


class PhraseSearchForm(forms.Form):
    """A single phrase, optionally with the article it came from."""

    kw = forms.CharField(max_length=200, error_messages={'required': 'kw required'})
    text = forms.CharField(required=False, strip=False, max_length=MAX_TEXT_LENGTH)
    terms = TermsField(required=False)


class CitationReasonForm(forms.Form):
    """A chosen link to explain for a phrase."""

    url = forms.URLField(max_length=2048, error_messages={'required': 'url & phrase required'})
    phrase = forms.CharField(max_length=200, error_messages={'required': 'url & phrase required'})
    sentence = forms.CharField(required=False, max_length=2000)


ERROR_CODES = {
    ('text', 'required'): 'text_required',
    ('kw', 'required'): 'kw_required',
    ('url', 'required'): 'url_required',
    ('phrase', 'required'): 'phrase_required',
}


def first_error(form: forms.Form) -> tuple[str, str]:
    """Return ``(message, code)`` for the first invalid field of ``form``."""

    for field, errors in form.errors.as_data().items():
        error = errors[0]
        code = ERROR_CODES.get((field, error.code or ''), error.code or 'invalid')
        if code in {'invalid', 'max_length'}:
            code = f'{field}_invalid'
        return ' '.join(error.messages), code
    return 'invalid request', 'invalid'
