"""Desktop GUI implementation built with PySide6/Qt.

:class:`~arduscope.gui.scope_view.ScopeView` paints the renderer's draw
commands, and :class:`~arduscope.gui.main_window.MainWindow` hosts it next to
the source/trigger controls. This layer only drives the Qt event loop; all
acquisition logic lives in :mod:`arduscope.core`.
"""
