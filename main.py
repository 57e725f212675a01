# main.py
import logging
import sys

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QTextEdit, QLineEdit, QFileDialog, QComboBox,
    QListWidget, QListWidgetItem, QMessageBox, QFormLayout
)
from PySide6.QtCore import Qt, QThread, QTimer, Signal, Slot

import settings
from api import ContactAPI, ContactWorker
from db import LocalStorage
from models import SUBJECT_DISPLAY_NAMES, Status
from store import ContactStore
from validators import format_errors, validate_contact
from views import export_csv, export_filename, make_filter, render_contacts, render_empty

logger = logging.getLogger(__name__)

APP_STYLE = """
QMainWindow { background-color: #1a2332; color: #ffffff; }
QTabBar::tab { background: #172026; color: #FFD700; padding: 8px; margin: 2px; border-radius: 6px; }
QWidget { color: #e6eef7; }
QPushButton { background: #233044; color: #FFD700; padding: 6px; border-radius: 6px; }
QLineEdit, QTextEdit, QComboBox, QListWidget { background: #0f1720; color: #e6eef7; border: 1px solid #2b3948; padding: 6px; border-radius: 4px; }
"""

STATUS_FILTERS = [("All Status", ""), ("New", "new"), ("Read", "read"), ("Replied", "replied")]


class FlashLabel(QLabel):
    """Label that hides itself again after a timeout."""
    def flash(self, text: str, duration: int = None):
        self.setText(text)
        self.show()
        QTimer.singleShot(duration or settings.MESSAGE_TIMEOUT_MS, self.hide)


class ContactFormTab(QWidget):
    def __init__(self, parent):
        super().__init__()
        self.parent = parent

        layout = QVBoxLayout()
        form = QFormLayout()
        self.first_name = QLineEdit()
        self.last_name = QLineEdit()
        self.email = QLineEdit()
        self.phone = QLineEdit()
        self.phone.setPlaceholderText("Optional")
        self.company = QLineEdit()
        self.company.setPlaceholderText("Optional")
        self.subject = QComboBox()
        self.subject.addItem("Select a subject", "")
        for key, label in SUBJECT_DISPLAY_NAMES.items():
            self.subject.addItem(label, key)
        self.message = QTextEdit()
        form.addRow("First Name:", self.first_name)
        form.addRow("Last Name:", self.last_name)
        form.addRow("Email:", self.email)
        form.addRow("Phone:", self.phone)
        form.addRow("Company:", self.company)
        form.addRow("Subject:", self.subject)
        form.addRow("Message:", self.message)

        self.submit_btn = QPushButton("Send Message")
        self.submit_btn.clicked.connect(self.submit)
        self.success_label = FlashLabel()
        self.success_label.hide()

        layout.addWidget(QLabel("<b>Get in touch</b>"))
        layout.addLayout(form)
        layout.addWidget(self.submit_btn)
        layout.addWidget(self.success_label)
        self.setLayout(layout)

    def form_data(self) -> dict:
        return {
            "firstName": self.first_name.text(),
            "lastName": self.last_name.text(),
            "email": self.email.text(),
            "phone": self.phone.text(),
            "company": self.company.text(),
            "subject": self.subject.currentData() or "",
            "message": self.message.toPlainText(),
        }

    def reset(self):
        for w in (self.first_name, self.last_name, self.email, self.phone, self.company):
            w.clear()
        self.subject.setCurrentIndex(0)
        self.message.clear()

    def set_busy(self, busy: bool):
        self.submit_btn.setDisabled(busy)
        self.submit_btn.setText("Sending..." if busy else "Send Message")

    def submit(self):
        data = self.form_data()
        errors = validate_contact(data)
        if errors:
            QMessageBox.warning(self, "Invalid", format_errors(errors))
            return
        # re-enabled only when the create itself finishes
        self.set_busy(True)
        self.parent.request_save.emit(data)


class SavedContactsTab(QWidget):
    def __init__(self, parent):
        super().__init__()
        self.parent = parent
        layout = QVBoxLayout()

        filter_layout = QHBoxLayout()
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search contacts...")
        self.search.textChanged.connect(lambda _text: self.refresh())
        self.status_filter = QComboBox()
        for label, value in STATUS_FILTERS:
            self.status_filter.addItem(label, value)
        self.status_filter.currentIndexChanged.connect(lambda _index: self.refresh())
        filter_layout.addWidget(self.search, 3)
        filter_layout.addWidget(self.status_filter, 1)

        self.list = QListWidget()
        self.empty_label = QLabel()
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        btn_layout = QHBoxLayout()
        self.read_btn = QPushButton("Mark as Read")
        self.read_btn.clicked.connect(lambda: self.update_selected(Status.READ))
        self.replied_btn = QPushButton("Mark as Replied")
        self.replied_btn.clicked.connect(lambda: self.update_selected(Status.REPLIED))
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(self.delete_selected)
        self.export_btn = QPushButton("Export CSV")
        self.export_btn.clicked.connect(self.export)
        self.reload_btn = QPushButton("Refresh")
        self.reload_btn.clicked.connect(self.parent.reload_from_storage)
        for b in (self.read_btn, self.replied_btn, self.delete_btn, self.export_btn, self.reload_btn):
            btn_layout.addWidget(b)

        layout.addWidget(QLabel("<b>Saved Contacts</b>"))
        layout.addLayout(filter_layout)
        layout.addWidget(self.list)
        layout.addWidget(self.empty_label)
        layout.addLayout(btn_layout)
        self.setLayout(layout)

    def refresh(self):
        term = self.search.text().strip()
        status = self.status_filter.currentData() or ""
        filtered = bool(term or status)
        cards = render_contacts(self.parent.api.get_contacts(), make_filter(term, status) if filtered else None)

        self.list.clear()
        for card in cards:
            item = QListWidgetItem(card.to_text())
            item.setData(Qt.ItemDataRole.UserRole, card.id)
            self.list.addItem(item)
        self.empty_label.setText("" if cards else render_empty(filtered))
        self.empty_label.setVisible(not cards)

    def selected_id(self):
        item = self.list.currentItem()
        if item is None:
            QMessageBox.information(self, "Select", "Select a contact first.")
            return None
        return item.data(Qt.ItemDataRole.UserRole)

    def update_selected(self, status: Status):
        contact_id = self.selected_id()
        if contact_id is not None:
            self.parent.request_status.emit(contact_id, status.value)

    def delete_selected(self):
        contact_id = self.selected_id()
        if contact_id is None:
            return
        if QMessageBox.question(self, "Delete", "Are you sure you want to delete this contact?") \
                == QMessageBox.StandardButton.Yes:
            self.list.setDisabled(True)
            self.parent.request_delete.emit(contact_id)

    def export(self):
        contacts = self.parent.api.get_contacts()
        if not contacts:
            QMessageBox.information(self, "Export", "No contacts to export.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export CSV", export_filename(), "CSV Files (*.csv)")
        if not path:
            return
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                f.write(export_csv(contacts))
        except OSError as e:
            QMessageBox.critical(self, "Error", f"Failed to export contacts: {e}")
            return
        logger.info("Exported %d contact(s) to %s", len(contacts), path)


class MainWindow(QMainWindow):
    request_save = Signal(object)
    request_delete = Signal(object)
    request_status = Signal(object, str)

    def __init__(self, store: ContactStore, api: ContactAPI):
        super().__init__()
        self.setWindowTitle("Portfolio Contacts")
        self.resize(820, 640)
        self.store = store
        self.api = api
        self._warned_degraded = False

        self.tabs = QTabWidget()
        self.form_tab = ContactFormTab(self)
        self.contacts_tab = SavedContactsTab(self)
        self.tabs.addTab(self.form_tab, "Contact")
        self.tabs.addTab(self.contacts_tab, "Saved Contacts")
        self.setCentralWidget(self.tabs)

        # long-lived worker; queued connections serialise the operations
        self.worker_thread = QThread()
        self.worker = ContactWorker(api)
        self.worker.moveToThread(self.worker_thread)
        self.request_save.connect(self.worker.save)
        self.request_delete.connect(self.worker.delete)
        self.request_status.connect(self.worker.update_status)
        self.worker.signals.saved.connect(self.on_saved)
        self.worker.signals.failed.connect(self.on_failed)
        self.worker.signals.deleted.connect(self.on_deleted)
        self.worker.signals.status_updated.connect(self.on_status_updated)
        self.worker.signals.save_finished.connect(self.on_save_finished)
        self.worker.signals.finished.connect(self.on_finished)
        self.worker_thread.start()

        self.contacts_tab.refresh()
        self.check_storage()

    def reload_from_storage(self):
        """Pick up changes written by another instance of the app."""
        self.store.load()
        self.contacts_tab.refresh()
        self.check_storage()

    def check_storage(self):
        if self.store.degraded and not self._warned_degraded:
            self._warned_degraded = True
            QMessageBox.warning(self, "Storage",
                                "Contacts cannot be saved to disk right now; changes are kept for this session only.\n\n"
                                f"{self.store.storage_error}")
        elif not self.store.degraded:
            self._warned_degraded = False

    @Slot(object)
    def on_saved(self, record):
        self.form_tab.success_label.flash(
            f"Thank you {record.first_name}! Your message has been saved successfully.")
        self.form_tab.reset()
        self.contacts_tab.refresh()
        self.check_storage()

    @Slot(str)
    def on_failed(self, message):
        QMessageBox.warning(self, "Error", message)

    @Slot(object, bool)
    def on_deleted(self, contact_id, found):
        self.contacts_tab.refresh()
        if found:
            self.statusBar().showMessage("Contact deleted successfully.", 3000)
        self.check_storage()

    @Slot(object, str, bool)
    def on_status_updated(self, contact_id, status, found):
        self.contacts_tab.refresh()
        if found:
            self.statusBar().showMessage(f"Contact marked as {status}.", 2000)
        self.check_storage()

    @Slot()
    def on_save_finished(self):
        self.form_tab.set_busy(False)

    @Slot()
    def on_finished(self):
        self.contacts_tab.list.setDisabled(False)

    def closeEvent(self, event):
        self.worker_thread.quit()
        self.worker_thread.wait()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=settings.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = ContactStore(LocalStorage(settings.DB_PATH))
    store.load()
    api = ContactAPI(store)
    logger.info("Portfolio contacts started with %d existing contact(s)", len(store.get_all()))

    app = QApplication(sys.argv)
    app.setStyleSheet(APP_STYLE)
    mw = MainWindow(store, api)
    mw.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
