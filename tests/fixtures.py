"""Sample scripts, sample patches and an in-memory ScriptStore"""

from __future__ import annotations

from script_bridge.models.script import ScriptError, ScriptFetchResult, ScriptWriteResult
from script_bridge.services.script_store import ScriptStore, ScriptStoreError

SIMPLE_SCRIPT = """const Component = Content.getComponent("Panel");
const value = 123;
const name = "test";
Component.setValue(value);
Component.repaint();"""

REPETITIVE_SCRIPT = """const knob1 = Content.getComponent("Knob1");
knob1.set("text", "Gain");
knob1.set("min", 0);
knob1.set("max", 100);

const knob2 = Content.getComponent("Knob2");
knob2.set("text", "Pan");
knob2.set("min", -100);
knob2.set("max", 100);

const knob3 = Content.getComponent("Knob3");
knob3.set("text", "Width");
knob3.set("min", 0);
knob3.set("max", 100);"""


def numbered_script(count: int) -> str:
    return "\n".join(f"const x{i} = {i};" for i in range(1, count + 1))


class FakeScriptStore(ScriptStore):
    """ScriptStore keeping scripts in a dict"""

    def __init__(self, scripts: dict | None = None):
        self.scripts: dict[tuple[str, str | None], str] = dict(scripts or {})
        self.writes: list[tuple[str, str | None, str, bool]] = []
        self.fetches: list[tuple[str, str | None]] = []
        self.compile_errors: list[ScriptError] = []
        self.fail_fetch = False

    async def fetch(self, module_id, callback=None):
        self.fetches.append((module_id, callback))
        if self.fail_fetch:
            raise ScriptStoreError("Cannot connect to HISE at http://localhost:1900")
        key = (module_id, callback)
        if key not in self.scripts:
            return ScriptFetchResult(
                success=False,
                module_id=module_id,
                callback=callback,
                errors=[ScriptError(error_message=f"Module {module_id} not found")],
            )
        return ScriptFetchResult(success=True, module_id=module_id, callback=callback, script=self.scripts[key])

    async def write(self, module_id, content, callback=None, compile=True):
        self.writes.append((module_id, callback, content, compile))
        self.scripts[(module_id, callback)] = content
        errors = [error.model_copy(deep=True) for error in self.compile_errors]
        return ScriptWriteResult(success=not errors, logs=["Compiled OK"] if not errors else [], errors=errors)

    async def recompile(self, module_id):
        errors = [error.model_copy(deep=True) for error in self.compile_errors]
        return ScriptWriteResult(success=not errors, errors=errors)


PATCH_REPLACE_SINGLE_LINE = """@@ -1,5 +1,5 @@
 const Component = Content.getComponent("Panel");
-const value = 123;
+const value = 456;
 const name = "test";
 Component.setValue(value);
 Component.repaint();"""

PATCH_DELETE_LINE = """@@ -1,5 +1,4 @@
 const Component = Content.getComponent("Panel");
 const value = 123;
-const name = "test";
 Component.setValue(value);
 Component.repaint();"""

PATCH_INSERT_LINE = """@@ -1,5 +1,6 @@
 const Component = Content.getComponent("Panel");
 const value = 123;
+const extra = "inserted";
 const name = "test";
 Component.setValue(value);
 Component.repaint();"""

PATCH_MULTIPLE_CHANGES = """@@ -1,5 +1,5 @@
 const Component = Content.getComponent("Panel");
-const value = 123;
-const name = "test";
+const value = 456;
+const name = "updated";
 Component.setValue(value);
 Component.repaint();"""

PATCH_INSERT_AT_END = """@@ -3,3 +3,5 @@
 const name = "test";
 Component.setValue(value);
 Component.repaint();
+
+Console.print("done");"""

PATCH_WRONG_CONTEXT = """@@ -1,3 +1,3 @@
 const WRONG = "this doesn't exist";
-const value = 123;
+const value = 456;
 const name = "test";"""

PATCH_MALFORMED = """This is not a valid patch
-old line
+new line"""

PATCH_MULTI_HUNK = """@@ -1,2 +1,2 @@
-const Component = Content.getComponent("Panel");
+const Component = Content.getComponent("MainPanel");
 const value = 123;
@@ -4,2 +4,2 @@
 Component.setValue(value);
-Component.repaint();
+Component.repaintImmediately();"""

# Header counts deliberately wrong

PATCH_WRONG_OLD_COUNT = """@@ -1,999 +1,4 @@
 const Component = Content.getComponent("Panel");
-const value = 123;
+const value = 456;
 const name = "test";
 Component.setValue(value);"""

PATCH_WRONG_NEW_COUNT = """@@ -2,4 +2,999 @@
 const value = 123;
+const extra = "inserted";
 const name = "test";
 Component.setValue(value);
 Component.repaint();"""

PATCH_WRONG_BOTH_COUNTS = """@@ -1,100 +1,200 @@
 const Component = Content.getComponent("Panel");
-const value = 123;
+const value = 456;
 const name = "test";"""

PATCH_MULTI_HUNK_WRONG_COUNTS = """@@ -1,999 +1,999 @@
-const Component = Content.getComponent("Panel");
+const Component = Content.getComponent("MainPanel");
 const value = 123;
@@ -4,888 +4,777 @@
 Component.setValue(value);
-Component.repaint();
+Component.repaintImmediately();"""

PATCH_MINIMAL_HEADER = """@@ -2 +2 @@
 const value = 123;
-const name = "test";
+const name = "updated";
 Component.setValue(value);"""


class BrokenFetchStore(FakeScriptStore):
    """Store whose fetch fails with something other than ScriptStoreError"""

    async def fetch(self, module_id, callback=None):
        self.fetches.append((module_id, callback))
        raise ValueError("Expecting value: line 1 column 1 (char 0)")
