"""faqsmith: turn a web page into a reviewed, exportable FAQ set."""

__version__ = "0.1.0"
