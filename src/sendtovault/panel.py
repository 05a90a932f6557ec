"""HTML fragments for the quota panel and prompts.

Every builder returns a self-contained HTML string suitable for
``mo.Html()`` in the notebook host.  All user- or server-supplied text is
escaped before interpolation.
"""

from __future__ import annotations

from html import escape
from urllib.parse import quote

from sendtovault.quota import is_near_limit, usage_fraction
from sendtovault.state import QuotaState
from sendtovault.ui import SyncSnapshot

PRICING_URL = "https://sendtovault.com/pricing"

_TEST_SUBJECT = "Test from Obsidian"
_TEST_BODY = "This is a test email to verify SendToVault integration."


def badge_text(snapshot: SyncSnapshot) -> str:
    """Ribbon badge label: the import count, or empty when nothing was imported."""
    return str(snapshot.imports_this_period) if snapshot.imports_this_period > 0 else ""


def quota_panel_html(snapshot: SyncSnapshot) -> str:
    quota = QuotaState(snapshot.quota_used, snapshot.quota_limit, snapshot.imports_this_period)
    pct = usage_fraction(quota) * 100
    fill_cls = "sendtovault-quota-fill"
    if is_near_limit(quota):
        fill_cls += " sendtovault-quota-warning"
    status = "" if snapshot.healthy else '<div class="sendtovault-status-error">Last sync failed; retrying.</div>'
    return f"""\
<div class="sendtovault-panel">
  <h3>SendToVault Status</h3>
  <div class="sendtovault-imports"><span>Imports this month: </span><strong>{snapshot.imports_this_period}</strong></div>
  {status}
  <div class="sendtovault-quota">
    <div>Monthly Quota</div>
    <div class="sendtovault-quota-bar"><div class="{fill_cls}" style="width: {pct:.1f}%"></div></div>
    <div class="sendtovault-quota-text">{snapshot.quota_used} / {snapshot.quota_limit}</div>
  </div>
</div>"""


def first_run_html(alias: str) -> str:
    mailto = f"mailto:{quote(alias, safe='@')}?subject={quote(_TEST_SUBJECT)}&body={quote(_TEST_BODY)}"
    return f"""\
<div class="sendtovault-first-run">
  <h2>Welcome to SendToVault!</h2>
  <p>Your email alias has been created. Send emails to this address to import notes into your vault:</p>
  <div class="sendtovault-alias-container"><code class="sendtovault-alias">{escape(alias)}</code></div>
  <a class="mod-cta" href="{escape(mailto)}">Send test email</a>
</div>"""


def paywall_html() -> str:
    return f"""\
<div class="sendtovault-paywall">
  <h2>Quota Exceeded</h2>
  <p>You've reached your monthly import limit. Upgrade to continue importing notes.</p>
  <a class="mod-cta" href="{PRICING_URL}" target="_blank">Upgrade Now</a>
</div>"""
