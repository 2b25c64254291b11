"""Jinja templates for the fragments written into the page."""

from __future__ import annotations

from jinja2 import DictLoader, Environment, StrictUndefined

CHIP_CLASS = "px-2 py-1 rounded bg-neutral-800/60 border border-neutral-700"

PRODUCT_CARD = """\
<article class="glass rounded-lg p-4 sm:p-6 shadow border border-neutral-800 card-hover text-left">
  <div class="flex items-start justify-between gap-3">
    <div class="min-w-0">
      <h3 class="text-lg sm:text-xl font-semibold text-neutral-100 truncate">{{ card.name }}</h3>
      <p class="text-neutral-400 text-sm mt-1 line-clamp-2">{{ card.summary }}</p>
    </div>
    <span class="shrink-0 text-xs px-2 py-1 rounded-full {{ 'bg-indigo-500/15 text-indigo-300 border border-indigo-500/20' if card.is_theme else 'bg-amber-500/15 text-amber-300 border border-amber-500/20' }}">{{ card.type_label }}</span>
  </div>
  <div class="mt-4 overflow-hidden rounded-lg border border-neutral-800/70">
    <img src="{{ card.banner_url }}" alt="{{ card.name }}" class="w-full h-32 object-cover" loading="lazy" decoding="async" onerror="this.onerror=null;this.src='{{ card.fallback_banner_url }}'">
  </div>
  <div class="mt-4 flex flex-wrap items-center gap-2 text-xs text-neutral-400">
    <span class="{{ chip }} {{ 'text-emerald-300' if card.is_free else 'text-blue-300' }}" data-price>{{ card.price_label }}</span>
    <span class="{{ chip }}" data-panels>{{ card.panels_display }} active panels</span>
    {%- if card.stars_display is not none %}
    <span class="{{ chip }}" data-stars>{{ card.stars_display }} stars</span>
    {%- endif %}
    {%- if card.forks_display is not none %}
    <span class="{{ chip }}" data-forks>{{ card.forks_display }} forks</span>
    {%- endif %}
    {%- if card.latest_label %}
    <span class="{{ chip }}">Latest {{ card.latest_label }}</span>
    {%- endif %}
    {%- if card.latest_date %}
    <span class="ml-auto text-neutral-500">Updated {{ card.latest_date }}</span>
    {%- endif %}
  </div>
  {%- if card.links %}
  <div class="mt-4 flex flex-col sm:flex-row sm:flex-wrap gap-2">
    {%- for link in card.links %}
    <a href="{{ link.href }}" target="_blank" rel="noopener noreferrer" class="{{ link.css_class }}">{{ link.label }}</a>
    {%- endfor %}
  </div>
  {%- endif %}
</article>
"""

GRID_MESSAGE = """\
<div class="col-span-full text-center text-neutral-400">
  <p>{{ message }}</p>
</div>
"""

MORE_TOGGLE = """\
<div id="{{ wrapper_id }}" class="mt-4 flex justify-center">
  <button type="button" class="inline-flex items-center justify-center px-4 py-2 rounded-lg bg-neutral-800 hover:bg-neutral-700 text-neutral-100 text-sm font-semibold transition-colors border border-neutral-700" aria-controls="{{ grid_id }}">{{ label }}</button>
</div>
"""

REPO_META = """\
<span class="{{ chip }}">{{ meta.language }}</span>
<span class="{{ chip }}">{{ stars }} stars</span>
<span class="{{ chip }}">{{ forks }} forks</span>
{%- if updated %}
<span class="ml-auto text-neutral-500">Updated {{ updated }}</span>
{%- endif %}
"""

DEFAULT_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Euphoria Development | Blueprints</title>
</head>
<body class="bg-neutral-950 text-neutral-100">
  <section id="blueprints">
    <p id="blueprint-products-note" class="text-neutral-400"></p>
    <h2>Addons <span id="blueprint-addon-count">0</span></h2>
    <div id="blueprint-addons-grid" class="grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6"></div>
    <h2>Themes <span id="blueprint-theme-count">0</span></h2>
    <div id="blueprint-themes-grid" class="grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6"></div>
  </section>
</body>
</html>
"""

ENVIRONMENT = Environment(
    loader=DictLoader(
        {
            "product_card.html": PRODUCT_CARD,
            "grid_message.html": GRID_MESSAGE,
            "more_toggle.html": MORE_TOGGLE,
            "repo_meta.html": REPO_META,
        }
    ),
    autoescape=True,
    undefined=StrictUndefined,
)
ENVIRONMENT.globals["chip"] = CHIP_CLASS


def render_template(name: str, **context) -> str:
    return ENVIRONMENT.get_template(name).render(**context)


__all__ = ["DEFAULT_PAGE", "ENVIRONMENT", "render_template"]
