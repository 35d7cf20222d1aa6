import marimo

__generated_with = "0.13.10"
app = marimo.App(width="full", app_title="Ramblog")


# ---------------------------------------------------------------------------
# Bootstrap: config, logging, store
# ---------------------------------------------------------------------------


@app.cell
def bootstrap():
    import calendar
    import sys
    from datetime import date
    from pathlib import Path

    import marimo as mo

    ROOT = Path(__file__).parent.parent
    SRC = ROOT / "src"
    if str(SRC) not in sys.path:
        sys.path.insert(0, str(SRC))

    from memos.config import load_config, open_store
    from memos.db import MemoDB
    from memos.errors import MemoStoreError
    from memos.memo import MemoDraft, MemoPatch

    config = load_config()
    store = open_store(config)
    return MemoDB, MemoDraft, MemoPatch, MemoStoreError, calendar, date, mo, store


# ---------------------------------------------------------------------------
# Reactive state
# ---------------------------------------------------------------------------


@app.cell
def state(mo):
    get_version, set_version = mo.state(0)
    get_selected, set_selected = mo.state("")
    # (kind, markdown) shown above the memo view, or None
    get_notice, set_notice = mo.state(None)
    return get_notice, get_selected, get_version, set_notice, set_selected, set_version


# ---------------------------------------------------------------------------
# Quick capture
# ---------------------------------------------------------------------------


@app.cell
def capture_form_cell(mo):
    capture_form = (
        mo.md("{title}\n\n{tags}\n\n{content}")
        .batch(
            title=mo.ui.text(placeholder="Title", full_width=True),
            tags=mo.ui.text(placeholder="tags, comma separated", full_width=True),
            content=mo.ui.text_area(placeholder="Write in Markdown…", full_width=True, rows=6),
        )
        .form(submit_button_label="Save memo", clear_on_submit=True)
    )
    return (capture_form,)


@app.cell
def capture_submit(MemoDraft, MemoStoreError, capture_form, get_version, mo, set_selected, set_version, store):
    capture_feedback = mo.md("")
    if capture_form.value:
        _fields = capture_form.value
        _draft = MemoDraft(
            title=_fields["title"].strip(),
            tags=[t.strip() for t in _fields["tags"].split(",") if t.strip()],
            content=_fields["content"],
        )
        try:
            _created = store.create(_draft)
        except MemoStoreError as _exc:
            capture_feedback = mo.callout(mo.md(f"Could not save memo: `{_exc}`"), kind="danger")
        else:
            set_selected(_created.id)
            set_version(get_version() + 1)
            capture_feedback = mo.callout(mo.md(f"Saved **{_created.id}**"), kind="success")
    return (capture_feedback,)


# ---------------------------------------------------------------------------
# Snapshot of the store (re-read whenever a memo changes)
# ---------------------------------------------------------------------------


@app.cell
def snapshot(MemoDB, get_version, store):
    get_version()
    memos = sorted(store.list_memos(), key=lambda m: m.created_at, reverse=True)
    memo_db = MemoDB(store)
    return memo_db, memos


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------


@app.cell
def sidebar_controls(memos, mo):
    search_input = mo.ui.text(placeholder="Search memos…", label="", full_width=True)
    tag_options = sorted({tag for m in memos for tag in m.tags})
    tag_filter = mo.ui.dropdown(options=["(all)"] + tag_options, value="(all)", label="Tag")
    return search_input, tag_filter


@app.cell
def sidebar_list(memos, mo, search_input, set_notice, set_selected, tag_filter):
    _query = search_input.value.strip().lower()
    _tag = tag_filter.value

    _results = memos
    if _query:
        _results = [m for m in _results if _query in m.title.lower() or _query in m.content.lower()]
    if _tag and _tag != "(all)":
        _results = [m for m in _results if _tag in m.tags]

    def _select(memo_id):
        set_notice(None)
        set_selected(memo_id)

    def _make_link(memo):
        return mo.ui.button(
            label=f"{memo.id}  {memo.title}",
            on_click=lambda _, memo_id=memo.id, select=_select: select(memo_id),
            kind="neutral",
            full_width=True,
        )

    memo_links = mo.ui.array([_make_link(m) for m in _results])
    sidebar = mo.vstack(
        [
            mo.md(f"## Memos ({len(_results)})"),
            search_input,
            tag_filter,
            mo.md("---"),
            *memo_links,
        ],
        gap="4px",
    )
    return memo_links, sidebar


# ---------------------------------------------------------------------------
# Memo view
# ---------------------------------------------------------------------------


@app.cell
def memo_view(MemoStoreError, get_notice, get_selected, get_version, mo, set_notice, set_selected, set_version, store):
    _memo_id = get_selected()
    _notice = get_notice()
    get_version()

    def _delete(_, memo_id=_memo_id):
        try:
            store.delete(memo_id)
        except MemoStoreError as exc:
            set_notice(("danger", f"Could not delete memo: `{exc}`"))
        else:
            set_notice(("success", f"Deleted **{memo_id}**"))
            set_selected("")
        set_version(get_version() + 1)

    delete_button = mo.ui.button(
        label="Delete memo", on_click=_delete, kind="danger", disabled=not _memo_id
    )

    if not _memo_id:
        _body = mo.md("_Select a memo from the sidebar or capture a new one._")
    else:
        try:
            _memo = store.get(_memo_id)
        except MemoStoreError as _exc:
            _body = mo.callout(mo.md(f"`{_exc}`"), kind="warn")
        else:
            _tags_md = " ".join(f"`#{t}`" for t in _memo.tags)
            _body = mo.vstack(
                [
                    mo.md(f"# {_memo.title or _memo.id}"),
                    mo.md(
                        f"`{_memo.id}` · created {_memo.created_at:%Y-%m-%d %H:%M}"
                        f" · updated {_memo.updated_at:%Y-%m-%d %H:%M}"
                    ),
                    mo.md(_tags_md) if _memo.tags else mo.md(""),
                    mo.md("---"),
                    mo.md(_memo.content),
                    delete_button,
                ]
            )

    if _notice:
        memo_panel = mo.vstack([mo.callout(mo.md(_notice[1]), kind=_notice[0]), _body])
    else:
        memo_panel = _body
    return delete_button, memo_panel


# ---------------------------------------------------------------------------
# Edit the selected memo
# ---------------------------------------------------------------------------


@app.cell
def edit_form_cell(MemoStoreError, get_selected, get_version, mo, store):
    get_version()
    _memo_id = get_selected()
    edit_form = None
    edit_placeholder = mo.md("_Select a memo to edit it._")
    if _memo_id:
        try:
            _memo = store.get(_memo_id)
        except MemoStoreError as _exc:
            edit_placeholder = mo.callout(mo.md(f"`{_exc}`"), kind="warn")
        else:
            edit_form = (
                mo.md(f"### Editing `{_memo.id}`\n\n{{title}}\n\n{{tags}}\n\n{{content}}")
                .batch(
                    title=mo.ui.text(value=_memo.title, placeholder="Title", full_width=True),
                    tags=mo.ui.text(value=", ".join(_memo.tags), placeholder="tags, comma separated", full_width=True),
                    content=mo.ui.text_area(value=_memo.content, full_width=True, rows=10),
                )
                .form(submit_button_label="Save changes")
            )
    return edit_form, edit_placeholder


@app.cell
def edit_submit(MemoPatch, MemoStoreError, edit_form, get_selected, get_version, set_notice, set_version, store):
    # Empty fields leave the stored value unchanged
    if edit_form is not None and edit_form.value:
        _memo_id = get_selected()
        _fields = edit_form.value
        _patch = MemoPatch(
            title=_fields["title"].strip(),
            tags=[t.strip() for t in _fields["tags"].split(",") if t.strip()],
            content=_fields["content"],
        )
        try:
            store.update(_memo_id, _patch)
        except MemoStoreError as _exc:
            set_notice(("danger", f"Could not update memo: `{_exc}`"))
        else:
            set_notice(("success", f"Updated **{_memo_id}**"))
        set_version(get_version() + 1)
    return


# ---------------------------------------------------------------------------
# Activity (heatmap, month calendar, tag statistics)
# ---------------------------------------------------------------------------


@app.cell
def month_picker_cell(date, mo):
    month_picker = mo.ui.date(value=date.today(), label="Month")
    return (month_picker,)


@app.cell
def activity(calendar, memo_db, mo, month_picker):
    _month = month_picker.value
    _days = memo_db.month_view(_month.year, _month.month)

    def _day_cell(day):
        if not day:
            return ""
        entries = _days.get(day, [])
        if not entries:
            return str(day)
        titles = "<br>".join((e["title"] or e["id"]).replace("|", "\\|") for e in entries)
        return f"**{day}**<br>{titles}"

    _header = "| " + " | ".join(calendar.day_abbr) + " |\n|" + "---|" * 7
    _weeks = calendar.Calendar().monthdayscalendar(_month.year, _month.month)
    _rows = ["| " + " | ".join(_day_cell(d) for d in week) + " |" for week in _weeks]
    month_calendar = mo.md(
        f"### {calendar.month_name[_month.month]} {_month.year}\n\n" + "\n".join([_header, *_rows])
    )

    activity_panel = mo.vstack(
        [
            mo.md("## Activity"),
            mo.md(f"{memo_db.count()} memos in total"),
            month_picker,
            month_calendar,
            mo.accordion(
                {
                    "Memos per day": mo.ui.table(memo_db.daily_counts()),
                    "Tag statistics": mo.ui.table(memo_db.tag_counts()),
                }
            ),
        ]
    )
    return activity_panel, month_calendar


# ---------------------------------------------------------------------------
# Main layout
# ---------------------------------------------------------------------------


@app.cell
def main_layout(activity_panel, capture_feedback, capture_form, edit_form, edit_placeholder, memo_panel, mo, sidebar):
    tabs = mo.ui.tabs(
        {
            "Memo": memo_panel,
            "Edit": edit_form if edit_form is not None else edit_placeholder,
            "Capture": mo.vstack([capture_form, capture_feedback]),
            "Activity": activity_panel,
        }
    )

    layout = mo.hstack(
        [
            mo.vstack([sidebar], style={"width": "280px", "min-width": "220px", "padding": "8px"}),
            mo.vstack([tabs], style={"flex": "1", "padding": "8px"}),
        ],
        align="start",
        gap="0",
    )
    layout
    return


if __name__ == "__main__":
    app.run()
