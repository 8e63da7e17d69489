ERRORS = {
  "E_LAYOUT_MISSING": "Board or diff log file missing",
  "E_TORN_RECORD": "Diff log ends with a partial record",
  "E_CORRUPT_RECORD": "Diff log contains malformed records",
  "E_OFFSET_RANGE": "Diff record offset is outside the board",
  "E_BOARD_DIVERGENCE": "Board byte does not match the last logged placement",
}
