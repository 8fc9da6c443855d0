"""CSS styles for the keychain transaction form."""

CSS = """
Screen {
    background: #1e1e2e;
}

Header {
    background: #181825;
    text-style: bold;
    padding: 0 1;
    height: 3;
}

Footer {
    background: #181825;
    height: 2;
}

Tabs {
    background: #181825;
    height: 3;
}

Tab {
    background: #1e1e2e;
    text-style: bold;
    padding: 0 1;
    min-height: 1;
}

Tab.-active {
    background: #22d3ee;
    color: #0f172a;
    text-style: bold reverse;
}

#form-body {
    padding: 1 2;
    height: 1fr;
    overflow-y: auto;
}

.section {
    height: auto;
    color: #f8fafc;
}

.section-head, .section-tail {
    height: auto;
    margin: 1 0;
}

.field-row {
    height: auto;
}

.input-field {
    border: tall #585858;
    background: #181825;
}

.input-field:focus {
    border: tall #ff5fd7;
}

TextArea.input-field {
    height: 6;
}

.field-error {
    height: auto;
    color: red;
}

#feedback {
    min-height: 1;
    margin-top: 1;
    padding: 0 2;
}

#help {
    color: #94a3b8;
    height: 1;
    padding: 0 2;
}
"""
