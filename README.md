# lumber

`lumber` turns raw log lines into compact, classified canonical events. It
has no dependencies outside the standard library.

Each log line goes through a small pipeline:

1. **Embed** – an `Embedder` (`lumber.embedding.embedder`) turns the text into
   a vector.
2. **Classify** – a `Classifier` (`lumber.classifier`) compares the vector by
   cosine similarity with the pre-embedded leaves of a `Taxonomy`
   (`lumber.taxonomy`). The best match wins. If its score is below the
   classifier's `threshold`, the label becomes `UNCLASSIFIED`.
3. **Compact** – a `Compactor` (`lumber.compactor`) strips high-cardinality
   JSON fields, shortens long stack traces, truncates the text according to a
   `Verbosity`, and writes a one-line summary.

`Engine(embedder, taxonomy, classifier, compactor)` (`lumber.engine`) runs
these three steps. `Engine.process(raw_log)` handles one `RawLog`.
`Engine.process_batch(raw_logs)` handles many with a single `embed_batch`
call and returns the events in input order. Both return `CanonicalEvent`
objects (`lumber.model`).

An event's `type` and `category` come from the label path, for example
`ERROR.connection_failure`. Its `severity` is the leaf's severity, or
`warning` for `UNCLASSIFIED`. Empty or whitespace-only input is never
embedded. It becomes an `UNCLASSIFIED` / `empty_input` event with severity
`warning` and confidence 0.

## Data types

`lumber.model` holds frozen dataclasses:

- `RawLog(timestamp, source, raw, metadata)` is a log line before
  classification.
- `CanonicalEvent(type, category, severity, timestamp, summary, confidence, raw, count)`
  is a classified event. `to_dict()` and `to_json(indent=None)` give its JSON
  form, with an RFC 3339 timestamp. `confidence`, `raw` and `count` are left
  out when they are empty or zero.
- `TaxonomyNode(name, children, desc, severity)` is a node of the taxonomy
  tree.
- `EmbeddedLabel(path, vector, severity)` is a taxonomy leaf together with
  its vector.

## Taxonomy

`default_roots()` returns the built-in tree. It has 42 leaves under 8 roots:
`ERROR`, `REQUEST`, `DEPLOY`, `SYSTEM`, `ACCESS`, `PERFORMANCE`, `DATA` and
`SCHEDULED`. Every leaf has a description and a severity.

`Taxonomy(roots, embedder)` embeds each leaf as `"{ROOT}: {leaf description}"`
in one batch. If the embedder fails, it raises `TaxonomyError`.
`labels()` returns the embedded labels and `roots()` returns the tree.

## Embedding

`Embedder` is an abstract base class with `embed(text)`,
`embed_batch(texts)` and `close()`, and it works as a context manager. Any
implementation can drive the `Engine` and `Taxonomy`.

`TransformerEmbedder(session, tokenizer, projection)` is the BERT-style
implementation:

- `Tokenizer` (`lumber.embedding.tokenizer`) is a lower-casing WordPiece
  tokenizer. It strips accents, splits on punctuation and on CJK characters,
  and truncates to 128 tokens including `[CLS]` and `[SEP]`. Create one with
  `Tokenizer.from_file("vocab.txt")`. `tokenize_batch` pads each batch to its
  longest sequence.
- `Vocab` (`lumber.embedding.vocab`) is loaded with `Vocab.load(path)`. The
  vocabulary must contain `[PAD]`, `[UNK]`, `[CLS]` and `[SEP]`; otherwise
  loading raises `VocabError`.
- `mean_pool` (`lumber.embedding.pooling`) averages hidden states over the
  real tokens.
- `Projection.load(path)` (`lumber.embedding.projection`) reads the F32
  `linear.weight` tensor from a safetensors file. `apply(vec)` multiplies a
  vector by it.

The `session` passed to `TransformerEmbedder` is provided by the caller. It
must have:

- an `embed_dim` attribute,
- a method `infer(input_ids, attention_mask, token_type_ids, batch_size, seq_len)`
  that returns flat `batch_size * seq_len * embed_dim` hidden states,
- a `close()` method.

If `embed_dim` does not match the projection's input size, the constructor
raises `ValueError`. Failures inside `infer` are raised as `EmbeddingError`.

## Compaction helpers

The compaction functions work on their own, without any model:

```python
from lumber.compactor import Compactor, Verbosity, estimate_tokens, summarize, truncate

truncate("hello world this is a test", 11)   # 'hello world...'
summarize("ERROR: connection refused\n\tat Main.run(Main.java:10)")
# 'ERROR: connection refused'
estimate_tokens("hello world")               # 3

compactor = Compactor(Verbosity.MINIMAL)
compacted, summary = compactor.compact('{"msg":"timeout","trace_id":"abc"}', "REQUEST")
# compacted == '{"msg":"timeout"}', summary is the first line of the input
```

The limits depend on the verbosity:

- `MINIMAL`: text is cut to 200 characters. Stack traces in `ERROR` events
  keep their first 5 and last 2 frames.
- `STANDARD`: the limits are 2000 characters and 10 frames.
- `FULL`: nothing is changed.

Below `FULL`, the fields in `strip_fields` are removed from JSON-object
lines. By default these are `trace_id`, `span_id`, `request_id`,
`x_request_id`, `correlation_id`, `dd.trace_id` and `dd.span_id`.
`truncate_stack_trace` and `strip_fields` can also be called directly.

## Deduplication

`Deduplicator(window=timedelta(seconds=5)).deduplicate_batch(events)`
(`lumber.dedup`) merges events of the same type and category whose timestamps
fall within `window` of the first event in their group. It keeps the order in
which groups first appear and sets `count` on merged events. It also adds the
count and time span to the summary, for example
`connection refused (x47 in 4m36s)`.

## Outputs

Events are written through an `Output` (`lumber.outputs.base`). An `Output`
has `write(event)` and `close()` and works as a context manager. The
available outputs are:

- `StdoutOutput(verbosity, pretty=False, stream=None)` writes one JSON line
  per event to standard output, or to `stream`. With `pretty=True` the JSON
  is indented.
- `FileOutput(path, verbosity, max_size=0, buf_size=65536)` appends buffered
  NDJSON to a file. When `max_size` is above zero, the file is rotated to
  `path.1` before a write that would exceed it, and older copies are shifted
  up to `path.10`.
- `WebhookOutput(url, headers=None, batch_size=50, flush_interval=5.0, timeout=10.0, on_error=None, backoff=1.0)`
  POSTs events as a JSON array. A batch is sent when it is full or when
  `flush_interval` seconds have passed since its first event.
  - 5xx responses are retried up to three times, with waits of `backoff`
    seconds that double each time.
  - Other failures raise `WebhookError`.
  - Errors from timer-driven flushes go to `on_error`.
- `MultiOutput(*outputs)` writes every event to each output. A failure in one
  output does not stop delivery to the others. All failures are raised
  together as an `ExceptionGroup`.
- `AsyncOutput(inner, buffer_size=1024, on_error=None, drop_on_full=False)`
  puts a queue and a background thread in front of another output.
  - When the buffer is full, `write` blocks, or drops the event if
    `drop_on_full` is set.
  - Errors from the wrapped output go to `on_error`.
  - `close()` drains the queue (waiting up to 5 seconds) and then closes the
    wrapped output.

`format_event(event, verbosity)` clears `raw` and `confidence` at `MINIMAL`
verbosity, so they are left out of the JSON.

## Logging

`lumber.logsetup.parse_level(name)` maps `debug`, `info`, `warn`/`warning`
and `error` (case-insensitive) to `logging` levels. Unknown names map to
`INFO`.

`init(output_is_stdout, level)` sends all logging to standard error. It logs
as JSON lines when events go to standard output, and as `key=value` text
otherwise.

## What this package does not do

- It has no command-line program. Everything is used as a library.
- It does not run transformer models itself. `TransformerEmbedder` needs an
  inference session supplied by the caller, and no model files are
  included.
- It does not collect logs from any provider. Callers build `RawLog` values
  themselves and pass them to the `Engine`.