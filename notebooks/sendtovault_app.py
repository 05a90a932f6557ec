import marimo

__generated_with = "0.13.10"
app = marimo.App(width="medium", app_title="SendToVault")


# ---------------------------------------------------------------------------
# Bootstrap: paths, config, sync client
# ---------------------------------------------------------------------------


@app.cell
def _setup():
    import sys
    from pathlib import Path

    import marimo as mo

    _ROOT = Path(__file__).parent.parent
    _SRC = _ROOT / "src"
    _VAULT_DIR = _ROOT / "vault"

    if str(_SRC) not in sys.path:
        sys.path.insert(0, str(_SRC))

    from sendtovault.app import SendToVaultApp
    from sendtovault.config import SyncConfig

    sync_config = SyncConfig.load(vault_dir=_VAULT_DIR)
    return SendToVaultApp, sync_config, mo


# ---------------------------------------------------------------------------
# Notebook UI capability
# ---------------------------------------------------------------------------


@app.cell
def _ui(mo):
    notices = mo.state([])
    prompt = mo.state("")

    class NotebookUI:
        """Collects notices and prompts into marimo state for rendering below."""

        def notify(self, message, timeout=None):
            notices[1](lambda items: (items + [message])[-5:])

        def prompt_first_run(self, alias, on_done):
            from sendtovault.panel import first_run_html

            prompt[1](first_run_html(alias))
            on_done()

        def prompt_paywall(self):
            from sendtovault.panel import paywall_html

            prompt[1](paywall_html())

        def open_note(self, path):
            notices[1](lambda items: (items + [f"Opened {path}"])[-5:])

        def copy_to_clipboard(self, text):
            notices[1](lambda items: (items + [f"Alias: {text}"])[-5:])

    return NotebookUI, notices, prompt


@app.cell
def _client(SendToVaultApp, NotebookUI, sync_config):
    sync_app = SendToVaultApp(sync_config, NotebookUI())
    sync_app.start()
    return (sync_app,)


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


@app.cell
def _controls(mo, sync_app):
    sync_button = mo.ui.button(label="Sync Now", on_click=lambda _: sync_app.force_sync(), kind="success")
    rotate_button = mo.ui.button(label="Rotate alias", on_click=lambda _: sync_app.rotate_alias())
    copy_button = mo.ui.button(label="Copy alias", on_click=lambda _: sync_app.copy_alias())
    auto_open = mo.ui.switch(
        value=sync_app.state.auto_open_imported,
        label="Auto-open imported notes",
        on_change=sync_app.set_auto_open,
    )
    return auto_open, copy_button, rotate_button, sync_button


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


@app.cell
def _layout(mo, sync_app, notices, prompt, sync_button, rotate_button, copy_button, auto_open):
    from sendtovault.panel import badge_text, quota_panel_html

    _snap = sync_app.snapshot()
    _badge = badge_text(_snap)
    _notice_md = "\n".join(f"- {n}" for n in notices[0]()) or "_No notices yet._"

    mo.vstack(
        [
            mo.md(f"## SendToVault {f'`{_badge}`' if _badge else ''}"),
            mo.md(f"**Alias:** `{_snap.alias or 'Not registered'}`"),
            mo.hstack([sync_button, rotate_button, copy_button, auto_open], gap="8px"),
            mo.Html(prompt[0]()) if prompt[0]() else mo.md(""),
            mo.Html(quota_panel_html(_snap)),
            mo.divider(),
            mo.md(_notice_md),
        ],
        gap="8px",
    )
    return


if __name__ == "__main__":
    app.run()
