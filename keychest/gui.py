# keychest/gui.py
# Keychest GUI: generator, live evaluator, vault records, settings

import os
import sys
import typing
from functools import partial

from PySide6.QtCore import QTimer
from PySide6.QtGui import QClipboard
from PySide6.QtWidgets import (
    QApplication, QWidget, QHBoxLayout, QVBoxLayout, QLabel, QLineEdit,
    QPushButton, QSpinBox, QCheckBox, QTextEdit, QGroupBox, QGridLayout,
    QMessageBox, QInputDialog, QListWidget, QDialog, QDialogButtonBox,
    QProgressBar, QComboBox, QFormLayout, QTabWidget,
)

from keychest.config import generator_defaults, load_config, save_config
from keychest.errors import ConfigurationError, VaultAuthError, VaultError
from keychest.evaluator import score_password
from keychest.generator import PasswordConfiguration, try_generate, validate
from keychest.logging_config import setup_logging
from keychest.messages import available_locales
from keychest.models import API_KEY, API_KEY_CATEGORIES, PASSWORD, PASSWORD_CATEGORIES
from keychest.service import CredentialService, VaultBackend
from keychest.storage import default_vault_path
from keychest.vault import create_vault, open_vault

CATEGORIES = {API_KEY: API_KEY_CATEGORIES, PASSWORD: PASSWORD_CATEGORIES}
TAB_TITLES = {API_KEY: "API Keys", PASSWORD: "Passwords"}

# strength color tag -> widget color
COLOR_HEX = {
    "success": "#17c964",
    "primary": "#006fee",
    "warning": "#f5a524",
    "danger": "#f31260",
}

# ---------------- UI building helpers ----------------

def make_generator_group(defaults: PasswordConfiguration):
    box = QGroupBox("Generator")
    layout = QGridLayout()
    box.setLayout(layout)

    lbl_len = QLabel("Length:")
    spin_len = QSpinBox()
    spin_len.setRange(4, 128)
    spin_len.setValue(defaults.length)

    chk_upper = QCheckBox("Uppercase (A-Z)")
    chk_upper.setChecked(defaults.include_uppercase)
    chk_lower = QCheckBox("Lowercase (a-z)")
    chk_lower.setChecked(defaults.include_lowercase)
    chk_digits = QCheckBox("Numbers (0-9)")
    chk_digits.setChecked(defaults.include_numbers)
    chk_symbols = QCheckBox("Symbols (!@#$...)")
    chk_symbols.setChecked(defaults.include_symbols)
    chk_similar = QCheckBox("Exclude similar (I, l, 1, 0)")
    chk_similar.setChecked(defaults.exclude_similar)
    chk_ambiguous = QCheckBox("Exclude ambiguous ({ } [ ] ...)")
    chk_ambiguous.setChecked(defaults.exclude_ambiguous)

    btn_generate = QPushButton("Generate")
    txt_generated = QLineEdit()
    txt_generated.setReadOnly(True)

    btn_copy = QPushButton("Copy (auto-clear)")
    btn_save_vault = QPushButton("Save to Vault")
    btn_manage_vault = QPushButton("Manage Vault")
    btn_settings = QPushButton("Settings")

    layout.addWidget(lbl_len, 0, 0)
    layout.addWidget(spin_len, 0, 1)
    layout.addWidget(chk_upper, 1, 0)
    layout.addWidget(chk_lower, 1, 1)
    layout.addWidget(chk_digits, 2, 0)
    layout.addWidget(chk_symbols, 2, 1)
    layout.addWidget(chk_similar, 3, 0)
    layout.addWidget(chk_ambiguous, 3, 1)
    layout.addWidget(btn_generate, 4, 0)
    layout.addWidget(btn_copy, 4, 1)
    layout.addWidget(btn_save_vault, 5, 0)
    layout.addWidget(btn_manage_vault, 5, 1)
    layout.addWidget(btn_settings, 6, 0)
    layout.addWidget(txt_generated, 7, 0, 1, 2)

    return {
        "widget": box,
        "spin_len": spin_len,
        "chk_upper": chk_upper,
        "chk_lower": chk_lower,
        "chk_digits": chk_digits,
        "chk_symbols": chk_symbols,
        "chk_similar": chk_similar,
        "chk_ambiguous": chk_ambiguous,
        "btn_generate": btn_generate,
        "txt_generated": txt_generated,
        "btn_copy": btn_copy,
        "btn_save_vault": btn_save_vault,
        "btn_manage_vault": btn_manage_vault,
        "btn_settings": btn_settings,
    }


def make_evaluator_group():
    box = QGroupBox("Evaluator")
    layout = QVBoxLayout()
    box.setLayout(layout)

    lbl_input = QLabel("Type or paste a password (live evaluation):")
    input_pw = QLineEdit()
    input_pw.setEchoMode(QLineEdit.Normal)

    bar_score = QProgressBar()
    bar_score.setRange(0, 100)
    bar_score.setValue(0)
    lbl_label = QLabel("Strength: N/A")
    txt_feedback = QTextEdit()
    txt_feedback.setReadOnly(True)
    txt_feedback.setMaximumHeight(160)

    layout.addWidget(lbl_input)
    layout.addWidget(input_pw)
    layout.addWidget(bar_score)
    layout.addWidget(lbl_label)
    layout.addWidget(QLabel("Suggestions:"))
    layout.addWidget(txt_feedback)

    return {
        "widget": box,
        "input_pw": input_pw,
        "bar_score": bar_score,
        "lbl_label": lbl_label,
        "txt_feedback": txt_feedback,
    }


def config_from_widgets(gen) -> PasswordConfiguration:
    return PasswordConfiguration(
        length=gen["spin_len"].value(),
        include_uppercase=gen["chk_upper"].isChecked(),
        include_lowercase=gen["chk_lower"].isChecked(),
        include_numbers=gen["chk_digits"].isChecked(),
        include_symbols=gen["chk_symbols"].isChecked(),
        exclude_similar=gen["chk_similar"].isChecked(),
        exclude_ambiguous=gen["chk_ambiguous"].isChecked(),
    )


def copy_to_clipboard(text: str) -> None:
    clipboard: QClipboard = QApplication.clipboard()
    clipboard.setText(text, mode=QClipboard.Clipboard)
    if clipboard.supportsSelection():
        clipboard.setText(text, mode=QClipboard.Selection)


class RecordFormDialog(QDialog):
    """Name / service / category / secret / description / expiration form."""

    def __init__(self, parent=None, kind=PASSWORD, secret=""):
        super().__init__(parent)
        self.kind = kind
        self.setWindowTitle(f"New {TAB_TITLES[kind][:-1]}")
        self.setMinimumWidth(420)

        form = QFormLayout()
        self.setLayout(form)

        self.input_name = QLineEdit()
        self.input_service = QLineEdit()
        self.combo_category = QComboBox()
        self.combo_category.addItems(list(CATEGORIES[kind]))
        self.combo_category.setCurrentIndex(len(CATEGORIES[kind]) - 1)
        self.input_secret = QLineEdit(secret)
        self.input_secret.setEchoMode(QLineEdit.Password)
        self.input_description = QLineEdit()
        self.input_expiration = QLineEdit()
        self.input_expiration.setPlaceholderText("YYYY-MM-DD (optional)")

        form.addRow("Name:", self.input_name)
        form.addRow("Service:", self.input_service)
        form.addRow("Category:", self.combo_category)
        form.addRow("API key:" if kind == API_KEY else "Password:", self.input_secret)
        form.addRow("Description:", self.input_description)
        form.addRow("Expiration:", self.input_expiration)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        form.addRow(btns)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

    def values(self):
        return {
            "name": self.input_name.text(),
            "service": self.input_service.text(),
            "secret": self.input_secret.text(),
            "category": self.combo_category.currentText(),
            "description": self.input_description.text(),
            "expiration": self.input_expiration.text() or None,
        }


class RecordsTab(QWidget):
    """Searchable list of one record kind with add / copy / remove actions."""

    def __init__(self, service: CredentialService, parent=None):
        super().__init__(parent)
        self.service = service
        self.records = []

        layout = QVBoxLayout()
        self.setLayout(layout)

        self.input_search = QLineEdit()
        self.input_search.setPlaceholderText("Search by name, service or category...")
        self.list_widget = QListWidget()
        layout.addWidget(self.input_search)
        layout.addWidget(self.list_widget)

        row = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_copy = QPushButton("Copy Secret")
        self.btn_remove = QPushButton("Remove")
        for b in (self.btn_add, self.btn_copy, self.btn_remove):
            row.addWidget(b)
        layout.addLayout(row)

        self.lbl_stats = QLabel("")
        layout.addWidget(self.lbl_stats)

        self.input_search.textChanged.connect(self.populate)
        self.btn_add.clicked.connect(self.on_add)
        self.btn_copy.clicked.connect(self.on_copy)
        self.btn_remove.clicked.connect(self.on_remove)

    def populate(self, *_):
        self.records = self.service.search(self.input_search.text())
        self.list_widget.clear()
        for r in self.records:
            expires = f" — expires {r.expiration}" if r.expiration else ""
            if r.is_expired():
                expires += " (expired)"
            self.list_widget.addItem(f"{r.name} — {r.service} [{r.category}] {r.masked_secret()}{expires}")
        stats = self.service.statistics()
        parts = ", ".join(f"{row['category']}: {row['count']}" for row in stats["by_category"])
        self.lbl_stats.setText(f"Total: {stats['total']}" + (f" ({parts})" if parts else ""))

    def add_record(self, secret=""):
        dlg = RecordFormDialog(self, kind=self.service.kind, secret=secret)
        if dlg.exec() != QDialog.Accepted:
            return None
        try:
            record = self.service.create(**dlg.values())
        except ValueError as e:
            QMessageBox.warning(self, "Invalid record", str(e))
            return None
        except VaultError as e:
            QMessageBox.critical(self, "Error", f"Failed to save: {e}")
            return None
        self.populate()
        return record

    def on_add(self):
        self.add_record()

    def _selected(self):
        idx = self.list_widget.currentRow()
        if idx < 0:
            QMessageBox.information(self, "Select", "Please select a record first.")
            return None
        return self.records[idx]

    def on_copy(self):
        record = self._selected()
        if record is None:
            return
        copy_to_clipboard(record.secret)
        QMessageBox.information(self, "Copied", "Secret copied to clipboard.")

    def on_remove(self):
        record = self._selected()
        if record is None:
            return
        confirm = QMessageBox.question(self, "Remove", f"Remove '{record.name}'? This cannot be undone.")
        if confirm != QMessageBox.Yes:
            return
        try:
            self.service.delete(record.id)
        except VaultError as e:
            QMessageBox.critical(self, "Error", f"Failed to remove: {e}")
            return
        self.populate()


class VaultDialog(QDialog):
    def __init__(self, parent=None, services=None, initial_kind=PASSWORD):
        super().__init__(parent)
        self.setWindowTitle("Vault")
        self.setMinimumSize(640, 420)

        layout = QVBoxLayout()
        self.setLayout(layout)

        self.tabs = QTabWidget()
        self.pages = {}
        for kind in (API_KEY, PASSWORD):
            page = RecordsTab(services[kind], self)
            page.populate()
            self.pages[kind] = page
            self.tabs.addTab(page, TAB_TITLES[kind])
        self.tabs.setCurrentWidget(self.pages[initial_kind])
        layout.addWidget(self.tabs)

        btns = QDialogButtonBox(QDialogButtonBox.Close)
        btns.rejected.connect(self.reject)
        layout.addWidget(btns)


class SettingsDialog(QDialog):
    def __init__(self, parent=None, cfg=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumSize(400, 200)
        cfg = cfg or load_config()
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.spin_clip = QSpinBox()
        self.spin_clip.setRange(2, 600)
        self.spin_clip.setValue(int(cfg.get("clipboard_clear_seconds", 20)))

        self.input_vault = QLineEdit()
        self.input_vault.setText(cfg.get("vault_path") or "")

        self.combo_locale = QComboBox()
        self.combo_locale.addItems(available_locales())
        self.combo_locale.setCurrentText(cfg.get("locale") or "en")

        layout.addWidget(QLabel("Clipboard auto-clear (seconds):"))
        layout.addWidget(self.spin_clip)
        layout.addWidget(QLabel("Vault file path (leave blank for default):"))
        layout.addWidget(self.input_vault)
        layout.addWidget(QLabel("Language:"))
        layout.addWidget(self.combo_locale)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        layout.addWidget(btns)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

    def values(self):
        return {
            "clipboard_clear_seconds": int(self.spin_clip.value()),
            "vault_path": self.input_vault.text() or None,
            "locale": self.combo_locale.currentText(),
        }


class KeychestGUI(QWidget):
    def __init__(self, cfg=None):
        super().__init__()
        self.setWindowTitle("Keychest — Generator & Vault")
        self.setMinimumSize(920, 480)
        self.clip_timer: typing.Optional[QTimer] = None
        self.master_password: typing.Optional[str] = None

        self.cfg = cfg or load_config()
        self.apply_config()

        main = QHBoxLayout()
        self.setLayout(main)

        try:
            defaults = generator_defaults(self.cfg)
            validate(defaults)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Generator settings", f"Stored generator settings ignored: {e}")
            defaults = PasswordConfiguration()
        gen = make_generator_group(defaults)
        evalg = make_evaluator_group()

        main.addWidget(gen["widget"], 1)
        main.addWidget(evalg["widget"], 1)

        gen["btn_generate"].clicked.connect(partial(self.on_generate_click, gen, evalg))
        gen["btn_copy"].clicked.connect(partial(self.on_copy_generated, gen))
        gen["btn_save_vault"].clicked.connect(partial(self.on_save_to_vault, gen))
        gen["btn_manage_vault"].clicked.connect(self.on_manage_vault)
        gen["btn_settings"].clicked.connect(self.on_settings)

        evalg["input_pw"].textChanged.connect(partial(self.on_password_changed, evalg))

        self.gen = gen
        self.evalg = evalg

    def apply_config(self):
        self.vault_path = self.cfg.get("vault_path") or default_vault_path()
        self.clip_clear_seconds = int(self.cfg.get("clipboard_clear_seconds", 20))
        self.locale = self.cfg.get("locale") or "en"

    # ----------------- Generator actions -----------------
    def on_generate_click(self, gen, evalg):
        result = try_generate(config_from_widgets(gen))
        if not result.ok:
            gen["txt_generated"].setText(f"Error: {result.error}")
            return
        gen["txt_generated"].setText(result.password)
        # place generated into evaluator input for convenience
        evalg["input_pw"].setText(result.password)

    def on_copy_generated(self, gen):
        pw = gen["txt_generated"].text()
        if not pw or pw.startswith("Error:"):
            return
        copy_to_clipboard(pw)

        btn = gen["btn_copy"]
        old_text = btn.text()
        btn.setText("Copied ✓")
        btn.setEnabled(False)
        QTimer.singleShot(1500, lambda: (btn.setText(old_text), btn.setEnabled(True)))

        self.start_clipboard_clear_timer(self.clip_clear_seconds)

    # ----------------- Vault -----------------
    def unlock_vault(self) -> bool:
        """Ask for the master password once per session; create the vault if missing."""
        if self.master_password is not None:
            return True
        master, ok = QInputDialog.getText(
            self, "Vault master", "Enter vault master password (will create vault if missing):", QLineEdit.Password
        )
        if not ok or master == "":
            return False
        try:
            if os.path.exists(self.vault_path):
                open_vault(master, self.vault_path)
            else:
                create_vault(master, self.vault_path)
        except VaultAuthError:
            QMessageBox.critical(self, "Vault error", "Incorrect master password or corrupted vault.")
            return False
        except (VaultError, OSError, ValueError) as e:
            QMessageBox.critical(self, "Vault error", f"Could not open vault: {e}")
            return False
        self.master_password = master
        return True

    def services(self):
        backend = VaultBackend(self.master_password, self.vault_path)
        return {kind: CredentialService(backend, kind) for kind in (API_KEY, PASSWORD)}

    def on_save_to_vault(self, gen):
        pw = gen["txt_generated"].text()
        if not pw or pw.startswith("Error:"):
            QMessageBox.information(self, "No password", "Generate a password first.")
            return
        if not self.unlock_vault():
            return
        tab = RecordsTab(self.services()[PASSWORD], self)
        record = tab.add_record(secret=pw)
        if record is not None:
            QMessageBox.information(self, "Saved", f"'{record.name}' added to vault.")

    def on_manage_vault(self):
        if not self.unlock_vault():
            return
        dlg = VaultDialog(self, services=self.services())
        dlg.exec()

    # ----------------- Settings -----------------
    def on_settings(self):
        dlg = SettingsDialog(self, self.cfg)
        if dlg.exec() != QDialog.Accepted:
            return
        vals = dlg.values()
        if (vals["vault_path"] or default_vault_path()) != self.vault_path:
            self.master_password = None
        self.cfg.update(vals)
        save_config(self.cfg)
        self.apply_config()
        self.on_password_changed(self.evalg, self.evalg["input_pw"].text())
        QMessageBox.information(self, "Saved", "Settings saved.")

    # ----------------- Clipboard -----------------
    def start_clipboard_clear_timer(self, seconds: int):
        if self.clip_timer and self.clip_timer.isActive():
            self.clip_timer.stop()
        self.clip_timer = QTimer(self)
        self.clip_timer.setSingleShot(True)
        self.clip_timer.timeout.connect(self.clear_clipboard)
        self.clip_timer.start(seconds * 1000)

    def clear_clipboard(self):
        copy_to_clipboard("")

    # ----------------- Evaluator -----------------
    def on_password_changed(self, evalg, text: str):
        if text == "":
            evalg["bar_score"].setValue(0)
            evalg["lbl_label"].setText("Strength: N/A")
            evalg["lbl_label"].setStyleSheet("")
            evalg["txt_feedback"].setPlainText("")
            return

        report = score_password(text, locale=self.locale)
        color = COLOR_HEX[report.color]
        evalg["bar_score"].setValue(report.score)
        evalg["bar_score"].setStyleSheet(f"QProgressBar::chunk {{ background-color: {color}; }}")
        evalg["lbl_label"].setText(f"Strength: {report.label} ({report.score} / 100)")
        evalg["lbl_label"].setStyleSheet(f"color: {color}; font-weight: bold;")
        evalg["txt_feedback"].setPlainText("\n".join("• " + line for line in report.feedback))


def main():
    cfg = load_config()
    setup_logging(cfg.get("log_level", "WARNING"))
    app = QApplication(sys.argv)
    gui = KeychestGUI(cfg)
    gui.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
